from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from flask import current_app, request

from jobboard.errors import ValidationError
from jobboard.models import Application, Job, User
from jobboard.references import ReferenceMaintainer
from jobboard.store import EntityStore

# marks "not populated": the bare id is serialized instead
_RAW = object()


def store() -> EntityStore:
    return current_app.extensions["jobboard.store"]


def references() -> ReferenceMaintainer:
    return current_app.extensions["jobboard.references"]


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError({"body": "must be a JSON object"})
    return data


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_summary(u: Optional[User]) -> Optional[Dict[str, Any]]:
    if u is None:
        return None
    return {"id": u.id, "name": u.name, "email": u.email}


def user_to_dict(u: User) -> Dict[str, Any]:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "mobile": u.mobile,
        "skills": u.skills or [],
        "postedJobs": u.posted_jobs or [],
        "applications": u.applications or [],
    }


def job_to_dict(j: Job, owner: Any = _RAW, applicants: Any = _RAW) -> Dict[str, Any]:
    """``owner``/``applicants`` replace the bare ids when given, even if None."""
    return {
        "id": j.id,
        "title": j.title,
        "companyName": j.company_name,
        "logoUrl": j.logo_url,
        "companySize": j.company_size,
        "location": j.location,
        "monthlySalary": j.monthly_salary,
        "jobType": j.job_type,
        "remoteOffice": j.remote_office,
        "isRemote": bool(j.is_remote),
        "description": j.description,
        "aboutCompany": j.about_company,
        "additionalInfo": j.additional_info,
        "skillsRequired": j.skills_required or [],
        "postedBy": j.posted_by if owner is _RAW else owner,
        "applicants": (j.applicants or []) if applicants is _RAW else list(applicants),
        "createdAt": _iso(j.created_at),
    }


def application_to_dict(a: Application, job: Any = _RAW, candidate: Any = _RAW) -> Dict[str, Any]:
    return {
        "id": a.id,
        "job": a.job_id if job is _RAW else job,
        "candidate": a.candidate_id if candidate is _RAW else candidate,
        "status": a.status,
        "resumeUrl": a.resume_url,
        "appliedAt": _iso(a.applied_at),
    }
