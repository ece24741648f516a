from typing import List, Optional

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from jobboard.db import Base, JSONList


class User(Base):
    __tablename__ = "users"
    # columns whose uniqueness violation is reported as a field validation error
    __unique_fields__ = ("email",)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    skills: Mapped[list] = mapped_column(JSONList, default=list)  # list[str]
    posted_jobs: Mapped[List[int]] = mapped_column(JSONList, default=list)  # Job ids
    applications: Mapped[List[int]] = mapped_column(JSONList, default=list)  # Application ids

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)
