"""Entity store. Every call runs in its own session, so chained calls are not atomic."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DataError, DisconnectionError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker

from jobboard import models  # noqa: F401  registers the tables on Base.metadata
from jobboard.db import Base
from jobboard.errors import Conflict, NotFound, ServiceUnavailable, ValidationError

log = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)

_UNAVAILABLE = (OperationalError, PoolTimeoutError, DisconnectionError)
# ids are INTEGER columns (int4 on Postgres); anything outside cannot exist
MAX_ID = 2**31 - 1


def valid_id(record_id: Any) -> bool:
    return isinstance(record_id, int) and not isinstance(record_id, bool) and 0 < record_id <= MAX_ID


def _load(s: Session, kind: Type[T], record_id: Any) -> Optional[T]:
    return s.get(kind, record_id) if valid_id(record_id) else None


class EntityStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)

    def create_schema(self) -> None:
        with self._guard():
            Base.metadata.create_all(self.engine)

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except _UNAVAILABLE as e:
            log.error("Store unavailable: %s", e)
            raise ServiceUnavailable("Data store unavailable") from e
        except DataError as e:
            # value the column type cannot hold (length, numeric range)
            log.warning("Store rejected a value: %s", e.orig)
            raise ValidationError({"body": "a value does not fit its field"}) from e

    @contextmanager
    def session(self) -> Iterator[Session]:
        with self._guard():
            with self._sessions() as s:
                try:
                    yield s
                except Exception:
                    s.rollback()
                    raise

    # ---------- documents ----------

    def create(self, kind: Type[T], fields: Dict[str, Any]) -> T:
        record = kind(**fields)
        with self.session() as s:
            s.add(record)
            try:
                s.commit()
            except IntegrityError as e:
                s.rollback()
                unique = getattr(kind, "__unique_fields__", ())
                if unique:
                    raise ValidationError({f: "is already in use" for f in unique}) from e
                raise Conflict(f"{kind.__name__} already exists") from e
        return record

    def get(self, kind: Type[T], record_id: int) -> T:
        record = self.find_by_id(kind, record_id)
        if record is None:
            raise NotFound(f"{kind.__name__} not found")
        return record

    def find_by_id(self, kind: Type[T], record_id: int) -> Optional[T]:
        with self.session() as s:
            return _load(s, kind, record_id)

    def update(self, kind: Type[T], record_id: int, fields: Dict[str, Any]) -> T:
        with self.session() as s:
            record = _load(s, kind, record_id)
            if record is None:
                raise NotFound(f"{kind.__name__} not found")
            for k, v in fields.items():
                setattr(record, k, v)
            s.commit()
            return record

    def delete(self, kind: Type[T], record_id: int) -> None:
        with self.session() as s:
            record = _load(s, kind, record_id)
            if record is None:
                raise NotFound(f"{kind.__name__} not found")
            s.delete(record)
            s.commit()

    def find(self, kind: Type[T], *conditions: Any, order_by: Sequence[Any] = ()) -> List[T]:
        stmt = select(kind).where(*conditions).order_by(*order_by)
        with self.session() as s:
            return list(s.scalars(stmt).all())

    def find_one(self, kind: Type[T], *conditions: Any) -> Optional[T]:
        with self.session() as s:
            return s.scalars(select(kind).where(*conditions).limit(1)).first()

    def find_many(self, kind: Type[T], ids: Sequence[int]) -> Dict[int, T]:
        ids = [i for i in ids if valid_id(i)]
        if not ids:
            return {}
        with self.session() as s:
            rows = s.scalars(select(kind).where(kind.id.in_(ids))).all()
        return {r.id: r for r in rows}

    def count(self, kind: Type[T]) -> int:
        with self.session() as s:
            return int(s.scalar(select(func.count()).select_from(kind)) or 0)

    # ---------- id lists ----------
    # Lists behave as insertion-ordered sets. Both return False when the
    # parent document no longer exists.

    def add_ref(self, kind: Type[T], record_id: int, column: str, ref_id: int) -> bool:
        with self.session() as s:
            record = _load(s, kind, record_id)
            if record is None:
                return False
            current = list(getattr(record, column) or [])
            if ref_id not in current:
                setattr(record, column, current + [ref_id])
                s.commit()
            return True

    def remove_ref(self, kind: Type[T], record_id: int, column: str, ref_id: int) -> bool:
        with self.session() as s:
            record = _load(s, kind, record_id)
            if record is None:
                return False
            current = list(getattr(record, column) or [])
            if ref_id in current:
                setattr(record, column, [i for i in current if i != ref_id])
                s.commit()
            return True
