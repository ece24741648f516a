import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobboard.db import Base, JSONList


class JobType(str, enum.Enum):
    FULL_TIME = "Full-Time"
    PART_TIME = "Part-Time"
    INTERNSHIP = "Internship"
    CONTRACT = "Contract"
    FREELANCE = "Freelance"


class WorkMode(str, enum.Enum):
    REMOTE = "Remote"
    OFFICE = "Office"
    HYBRID = "Hybrid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    company_size: Mapped[str] = mapped_column(String(40), default="11-50")
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    monthly_salary: Mapped[float] = mapped_column(Float, nullable=False)
    job_type: Mapped[str] = mapped_column(String(40), nullable=False)
    remote_office: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_remote: Mapped[bool] = mapped_column(Boolean, default=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    about_company: Mapped[str] = mapped_column(Text, default="")
    additional_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    skills_required: Mapped[list] = mapped_column(JSONList, default=list)  # list[str]
    posted_by: Mapped[int] = mapped_column(Integer, nullable=False, index=True)  # User id, immutable
    applicants: Mapped[List[int]] = mapped_column(JSONList, default=list)  # Application ids
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
