from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from jobboard.errors import ValidationError
from jobboard.models import ApplicationStatus, Job, JobType, User, WorkMode

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# lower-cased, punctuation-free spelling -> canonical job type
_JOB_TYPE_SYNONYMS = {
    "fulltime": JobType.FULL_TIME,
    "ft": JobType.FULL_TIME,
    "permanent": JobType.FULL_TIME,
    "parttime": JobType.PART_TIME,
    "pt": JobType.PART_TIME,
    "internship": JobType.INTERNSHIP,
    "intern": JobType.INTERNSHIP,
    "contract": JobType.CONTRACT,
    "contractor": JobType.CONTRACT,
    "freelance": JobType.FREELANCE,
    "freelancer": JobType.FREELANCE,
}

# payload key -> column name, for plain optional text fields
_TEXT_FIELDS = {
    "title": "title",
    "companyName": "company_name",
    "location": "location",
    "description": "description",
    "aboutCompany": "about_company",
    "companySize": "company_size",
    "additionalInfo": "additional_info",
}
_REQUIRED_JOB_FIELDS = ("title", "companyName", "location", "monthlySalary", "jobType", "description")


def _too_long(model: type, column: str, value: str) -> Optional[str]:
    limit = getattr(model.__table__.c[column].type, "length", None)
    if limit is not None and len(value) > limit:
        return f"must be at most {limit} characters"
    return None


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _key(value: str) -> str:
    return re.sub(r"[^a-z]", "", value.lower())


def normalize_job_type(value: Any) -> JobType:
    if isinstance(value, JobType):
        return value
    if isinstance(value, str):
        found = _JOB_TYPE_SYNONYMS.get(_key(value))
        if found is not None:
            return found
    allowed = ", ".join(t.value for t in JobType)
    raise ValueError(f"must be one of: {allowed}")


def normalize_work_mode(value: Any) -> WorkMode:
    if isinstance(value, WorkMode):
        return value
    if isinstance(value, str):
        for mode in WorkMode:
            if _key(value) == mode.value.lower():
                return mode
    allowed = ", ".join(m.value for m in WorkMode)
    raise ValueError(f"must be one of: {allowed}")


def normalize_status(value: Any) -> ApplicationStatus:
    if isinstance(value, ApplicationStatus):
        return value
    if isinstance(value, str):
        for status in ApplicationStatus:
            if value.strip() == status.value:
                return status
    allowed = ", ".join(s.value for s in ApplicationStatus)
    raise ValueError(f"must be one of: {allowed}")


def coerce_amount(value: Any) -> float:
    """Numeric coercion used for salaries: numbers and numeric strings, never negative."""
    if isinstance(value, bool):
        raise ValueError("must be a number")
    if not isinstance(value, (int, float, str)) or (isinstance(value, str) and not value.strip()):
        raise ValueError("must be a number")
    try:
        amount = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        raise ValueError("must be a number")
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise ValueError("must be a number")
    if amount < 0:
        raise ValueError("must not be negative")
    return amount


def coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "1", "yes"}:
        return True
    if isinstance(value, str) and value.strip().lower() in {"false", "0", "no"}:
        return False
    raise ValueError("must be true or false")


def normalize_tags(value: Any) -> List[str]:
    """Accepts a list or a comma-separated string; trims, drops blanks and repeats."""
    if value is None:
        return []
    if isinstance(value, list):
        items = [str(t).strip() for t in value]
    elif isinstance(value, str):
        items = [t.strip() for t in value.split(",")]
    else:
        return []
    return list(dict.fromkeys(t for t in items if t))


def clean_job(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """With ``partial=True`` only supplied keys are returned; postedBy, applicants and createdAt are never taken."""
    if not isinstance(data, dict):
        raise ValidationError({"body": "must be a JSON object"})

    errors: Dict[str, str] = {}
    out: Dict[str, Any] = {}

    if not partial:
        for field in _REQUIRED_JOB_FIELDS:
            if _blank(data.get(field)):
                errors[field] = "is required"

    for field, column in _TEXT_FIELDS.items():
        if field not in data or field in errors:
            continue
        value = data[field]
        if value is None and field not in _REQUIRED_JOB_FIELDS:
            # only additionalInfo can be cleared; the others keep their defaults
            if column == "additional_info":
                out[column] = None
            continue
        if not isinstance(value, str):
            errors[field] = "must be a string"
        elif field in _REQUIRED_JOB_FIELDS and not value.strip():
            errors[field] = "must not be empty"
        else:
            reason = _too_long(Job, column, value.strip())
            if reason:
                errors[field] = reason
            else:
                out[column] = value.strip()

    logo = data.get("logoUrl", data.get("companyLogoUrl"))
    if "logoUrl" in data or "companyLogoUrl" in data:
        out["logo_url"] = logo.strip() if isinstance(logo, str) and logo.strip() else None

    if "monthlySalary" in data and "monthlySalary" not in errors:
        try:
            out["monthly_salary"] = coerce_amount(data["monthlySalary"])
        except ValueError as e:
            errors["monthlySalary"] = str(e)

    if "jobType" in data and "jobType" not in errors:
        try:
            out["job_type"] = normalize_job_type(data["jobType"]).value
        except ValueError as e:
            errors["jobType"] = str(e)

    mode: Optional[WorkMode] = None
    if not _blank(data.get("remoteOffice")):
        try:
            mode = normalize_work_mode(data["remoteOffice"])
        except ValueError as e:
            errors["remoteOffice"] = str(e)
    is_remote: Optional[bool] = None
    if data.get("isRemote") is not None:
        try:
            is_remote = coerce_bool(data["isRemote"])
        except ValueError as e:
            errors["isRemote"] = str(e)
    if mode is not None and is_remote is not None and is_remote != (mode is WorkMode.REMOTE):
        errors["isRemote"] = f"contradicts remoteOffice '{mode.value}'"
    elif mode is not None:
        out["remote_office"] = mode.value
        out["is_remote"] = mode is WorkMode.REMOTE
    elif is_remote is not None:
        out["remote_office"] = (WorkMode.REMOTE if is_remote else WorkMode.OFFICE).value
        out["is_remote"] = is_remote
    elif not partial:
        out["remote_office"] = None
        out["is_remote"] = False

    if "skillsRequired" in data:
        out["skills_required"] = normalize_tags(data["skillsRequired"])

    if errors:
        raise ValidationError(errors)

    if not partial:
        out.setdefault("skills_required", [])
        if not out.get("company_size"):
            out["company_size"] = "11-50"
        if not out.get("about_company"):
            out["about_company"] = out["company_name"]
    return out


def clean_registration(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError({"body": "must be a JSON object"})

    errors: Dict[str, str] = {}
    name = data.get("name")
    email = data.get("email")
    password = data.get("password")

    if _blank(name) or not isinstance(name, str):
        errors["name"] = "is required"
    if _blank(email) or not isinstance(email, str):
        errors["email"] = "is required"
    elif not _EMAIL_RE.match(email.strip()):
        errors["email"] = "is not a valid email address"
    if _blank(password) or not isinstance(password, str):
        errors["password"] = "is required"
    elif len(password) < 6:
        errors["password"] = "must be at least 6 characters"
    mobile = data.get("mobile")
    if mobile is not None and not isinstance(mobile, str):
        errors["mobile"] = "must be a string"

    for field, value in (("name", name), ("email", email), ("mobile", mobile)):
        if field not in errors and isinstance(value, str):
            reason = _too_long(User, field, value.strip())
            if reason:
                errors[field] = reason

    if errors:
        raise ValidationError(errors)

    return {
        "name": name.strip(),
        "email": normalize_email(email),
        "password": password,
        "mobile": mobile.strip() if mobile and mobile.strip() else None,
        "skills": normalize_tags(data.get("skills")),
    }


def normalize_email(email: str) -> str:
    return email.strip().lower()


def clean_status(data: Dict[str, Any]) -> ApplicationStatus:
    if not isinstance(data, dict) or _blank(data.get("status")):
        raise ValidationError({"status": "is required"})
    try:
        return normalize_status(data["status"])
    except ValueError as e:
        raise ValidationError({"status": str(e)})
