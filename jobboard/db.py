from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase

# JSON array column; JSONB on Postgres so array operators are available
JSONList = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    pass


def _connect_args(url: str, timeout: float) -> dict:
    if url.startswith("postgresql"):
        return {
            "connect_timeout": max(int(timeout), 1),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        }
    if url.startswith("sqlite"):
        return {"timeout": timeout}
    return {}


def make_engine(url: str, timeout: float = 5.0) -> Engine:
    kwargs = {"echo": False, "pool_pre_ping": True, "connect_args": _connect_args(url, timeout)}
    if not url.startswith("sqlite"):
        kwargs["pool_timeout"] = timeout
    return create_engine(url, **kwargs)
