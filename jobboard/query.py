from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from sqlalchemy import desc, exists, false, func, select

from jobboard.errors import ValidationError
from jobboard.models import Application, Job
from jobboard.store import EntityStore
from jobboard.validation import coerce_amount, normalize_job_type, normalize_tags, normalize_work_mode

log = logging.getLogger(__name__)

NEWEST_JOBS_FIRST = (desc(Job.created_at), desc(Job.id))
NEWEST_APPLICATIONS_FIRST = (desc(Application.applied_at), desc(Application.id))


@dataclass(frozen=True)
class JobQuery:
    """
    Immutable set of optional job criteria; every supplied one must match.

    Attributes:
        title: case-insensitive substring of the title
        location: case-insensitive substring of the location
        job_type: canonical job type
        remote_office: canonical work mode
        skills: match jobs requiring any of these
        min_salary / max_salary: inclusive monthly salary bounds
        posted_by: restrict to one owner
    """

    title: str = ""
    location: str = ""
    job_type: Optional[str] = None
    remote_office: Optional[str] = None
    skills: tuple[str, ...] = field(default_factory=tuple)
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    posted_by: Optional[int] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any], posted_by: Optional[int] = None) -> "JobQuery":
        """Parse request arguments; blank values count as absent. Bad values raise ValidationError."""
        errors = {}

        def text(name: str) -> str:
            value = args.get(name)
            return value.strip() if isinstance(value, str) else ""

        job_type = remote_office = None
        min_salary = max_salary = None
        if text("jobType"):
            try:
                job_type = normalize_job_type(text("jobType")).value
            except ValueError as e:
                errors["jobType"] = str(e)
        if text("remoteOffice"):
            try:
                remote_office = normalize_work_mode(text("remoteOffice")).value
            except ValueError as e:
                errors["remoteOffice"] = str(e)
        if text("minSalary"):
            try:
                min_salary = coerce_amount(text("minSalary"))
            except ValueError as e:
                errors["minSalary"] = str(e)
        if text("maxSalary"):
            try:
                max_salary = coerce_amount(text("maxSalary"))
            except ValueError as e:
                errors["maxSalary"] = str(e)
        if errors:
            raise ValidationError(errors, message="Invalid query parameters")

        return cls(
            title=text("title"),
            location=text("location"),
            job_type=job_type,
            remote_office=remote_office,
            skills=tuple(normalize_tags(text("skills"))),
            min_salary=min_salary,
            max_salary=max_salary,
            posted_by=posted_by,
        )

    @property
    def is_empty_range(self) -> bool:
        return self.min_salary is not None and self.max_salary is not None and self.min_salary > self.max_salary

    def conditions(self, dialect: str = "sqlite") -> List[Any]:
        if self.is_empty_range:
            return [false()]

        conds: List[Any] = []
        if self.posted_by is not None:
            conds.append(Job.posted_by == self.posted_by)
        if self.title:
            conds.append(Job.title.icontains(self.title, autoescape=True))
        if self.location:
            conds.append(Job.location.icontains(self.location, autoescape=True))
        if self.job_type:
            conds.append(Job.job_type == self.job_type)
        if self.remote_office:
            conds.append(Job.remote_office == self.remote_office)
        if self.min_salary is not None:
            conds.append(Job.monthly_salary >= self.min_salary)
        if self.max_salary is not None:
            conds.append(Job.monthly_salary <= self.max_salary)
        if self.skills:
            conds.append(_requires_any_skill(list(self.skills), dialect))
        return conds


def _requires_any_skill(skills: List[str], dialect: str) -> Any:
    if dialect == "postgresql":
        return func.jsonb_exists_any(Job.skills_required, skills)
    elements = func.json_each(Job.skills_required).table_valued("value")
    return exists(select(elements.c.value).where(elements.c.value.in_(skills)))


def find_jobs(store: EntityStore, query: JobQuery) -> List[Job]:
    conds = query.conditions(store.engine.dialect.name)
    log.debug("Job search: %s", query)
    jobs = store.find(Job, *conds, order_by=NEWEST_JOBS_FIRST)
    log.debug("Found %d jobs", len(jobs))
    return jobs


def find_applications_by_candidate(store: EntityStore, candidate_id: int) -> List[Application]:
    return store.find(Application, Application.candidate_id == candidate_id, order_by=NEWEST_APPLICATIONS_FIRST)
