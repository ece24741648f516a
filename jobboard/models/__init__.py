from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.job import Job, JobType, WorkMode
from jobboard.models.user import User

__all__ = ["Application", "ApplicationStatus", "Job", "JobType", "User", "WorkMode"]
