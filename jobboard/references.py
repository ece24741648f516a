"""Back-reference maintenance. Mirror writes never raise; failures are logged and left for reconcile()."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from jobboard.errors import Conflict, NotFound, ReferencePropagationError, ServiceUnavailable
from jobboard.guard import require_job_owner, require_may_apply
from jobboard.models import Application, ApplicationStatus, Job, User
from jobboard.store import EntityStore
from jobboard.validation import clean_job

log = logging.getLogger(__name__)

_IMMUTABLE_JOB_FIELDS = {"id", "posted_by", "created_at", "applicants"}


@dataclass
class ReconcileReport:
    users_repaired: int = 0
    jobs_repaired: int = 0
    orphaned_jobs: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "usersRepaired": self.users_repaired,
            "jobsRepaired": self.jobs_repaired,
            "orphanedJobs": list(self.orphaned_jobs),
        }


class ReferenceMaintainer:
    def __init__(self, store: EntityStore, allow_owner_apply: bool = True) -> None:
        self.store = store
        self.allow_owner_apply = allow_owner_apply

    def _propagate(self, op: Callable[..., bool], kind: type, record_id: int, column: str, ref_id: int) -> bool:
        """Run one mirror write. Never raises; returns whether the list now reflects the change."""
        target = f"{kind.__name__}({record_id}).{column}"
        try:
            found = op(kind, record_id, column, ref_id)
        except (SQLAlchemyError, ServiceUnavailable) as e:
            err = ReferencePropagationError(f"{op.__name__} {ref_id} on {target}")
            log.error("reference propagation failure: %s: %s", err, e)
            return False
        if not found:
            log.warning("reference target missing, skipped %s %s on %s", op.__name__, ref_id, target)
        return found

    # ---------- jobs ----------

    def create_job(self, caller_id: int, fields: Dict[str, Any]) -> Job:
        self.store.get(User, caller_id)
        values = {k: v for k, v in fields.items() if k not in _IMMUTABLE_JOB_FIELDS}
        values["posted_by"] = caller_id
        values["applicants"] = []
        job = self.store.create(Job, values)
        log.info("Job %s created by user %s", job.id, caller_id)

        self._propagate(self.store.add_ref, User, caller_id, "posted_jobs", job.id)
        return job

    def update_job(self, caller_id: int, job_id: int, payload: Dict[str, Any]) -> Job:
        """Takes the raw request payload; it is validated only once the caller owns an existing job."""
        job = self.store.get(Job, job_id)
        require_job_owner(job, caller_id)
        fields = clean_job(payload, partial=True)
        patch = {k: v for k, v in fields.items() if k not in _IMMUTABLE_JOB_FIELDS}
        if not patch:
            return job
        job = self.store.update(Job, job_id, patch)
        log.info("Job %s updated (%s)", job_id, ", ".join(sorted(patch)))
        return job

    def delete_job(self, caller_id: int, job_id: int) -> None:
        job = self.store.get(Job, job_id)
        require_job_owner(job, caller_id)
        self.store.delete(Job, job_id)
        log.info("Job %s deleted by user %s (%d applications left in place)", job_id, caller_id, len(job.applicants or []))

        self._propagate(self.store.remove_ref, User, job.posted_by, "posted_jobs", job_id)

    # ---------- applications ----------

    def create_application(self, caller_id: int, job_id: int, resume_url: Optional[str] = None) -> Application:
        job = self.store.find_by_id(Job, job_id)
        if job is None:
            raise NotFound("Job not found")
        require_may_apply(job, caller_id, self.allow_owner_apply)

        existing = self.store.find_one(
            Application, Application.job_id == job_id, Application.candidate_id == caller_id
        )
        if existing is not None:
            raise Conflict("Already applied to this job")

        try:
            application = self.store.create(
                Application,
                {
                    "job_id": job_id,
                    "candidate_id": caller_id,
                    "status": ApplicationStatus.PENDING.value,
                    "resume_url": resume_url,
                },
            )
        except Conflict:
            raise Conflict("Already applied to this job")
        log.info("Application %s created for job %s by user %s", application.id, job_id, caller_id)

        self._propagate(self.store.add_ref, Job, job_id, "applicants", application.id)
        self._propagate(self.store.add_ref, User, caller_id, "applications", application.id)
        return application

    # ---------- repair ----------

    def reconcile(self) -> ReconcileReport:
        """Recompute every mirrored id list from the canonical fields."""
        report = ReconcileReport()
        with self.store.session() as s:
            users = s.scalars(select(User).order_by(User.id)).all()
            jobs = s.scalars(select(Job).order_by(Job.created_at, Job.id)).all()
            applications = s.scalars(select(Application).order_by(Application.applied_at, Application.id)).all()

            posted: Dict[int, List[int]] = defaultdict(list)
            applied: Dict[int, List[int]] = defaultdict(list)
            applicants: Dict[int, List[int]] = defaultdict(list)
            for j in jobs:
                posted[j.posted_by].append(j.id)
            for a in applications:
                applied[a.candidate_id].append(a.id)
                applicants[a.job_id].append(a.id)

            user_ids = set()
            for u in users:
                user_ids.add(u.id)
                if list(u.posted_jobs or []) != posted[u.id] or list(u.applications or []) != applied[u.id]:
                    u.posted_jobs = posted[u.id]
                    u.applications = applied[u.id]
                    report.users_repaired += 1
            for j in jobs:
                if list(j.applicants or []) != applicants[j.id]:
                    j.applicants = applicants[j.id]
                    report.jobs_repaired += 1
                if j.posted_by not in user_ids:
                    report.orphaned_jobs.append(j.id)
            s.commit()

        if report.orphaned_jobs:
            log.warning("Jobs with a missing owner: %s", report.orphaned_jobs)
        log.info("Reconciled references: %d users, %d jobs rewritten", report.users_repaired, report.jobs_repaired)
        return report
