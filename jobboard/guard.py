"""Ownership rules for jobs and applications."""
from __future__ import annotations

from typing import Optional

from jobboard.errors import Forbidden, NotFound
from jobboard.models import Application, Job


def require_job_owner(job: Job, caller_id: int) -> None:
    """Job update/delete: only the poster."""
    if job.posted_by != caller_id:
        raise Forbidden("Not authorized")


def require_may_apply(job: Job, caller_id: int, allow_owner: bool) -> None:
    if not allow_owner and job.posted_by == caller_id:
        raise Forbidden("Job owners cannot apply to their own jobs")


def require_application_reader(application: Application, job: Optional[Job], caller_id: int) -> None:
    """
    Single application read: the candidate, or the poster of the referenced job.

    ``job`` is None when the job was deleted after the application was made;
    only the candidate can still read it then.
    """
    if application.candidate_id == caller_id:
        return
    if job is not None and job.posted_by == caller_id:
        return
    raise Forbidden("Not authorized")


def require_status_editor(job: Optional[Job], caller_id: int) -> None:
    if job is None:
        raise NotFound("Job not found")
    if job.posted_by != caller_id:
        raise Forbidden("Not authorized")
