"""Async gateway to the relational store.

Exposes four primitives (query, update, delete, call_procedure). Each one is
a single unit of work: it runs in a worker thread on a fresh session, commits
on success and rolls back on failure. Store faults surface as ``StoreError``.
"""

import asyncio
import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from inspect import signature
from typing import Any, TypeVar

from sqlalchemy import asc, desc, inspect, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from typing_extensions import ParamSpec

from car_admin.database.engine import make_session_factory
from car_admin.database.procedures import PROCEDURES
from car_admin.errors import StoreError
from car_admin.models.db_models import Base

P = ParamSpec("P")
R = TypeVar("R")
ModelT = TypeVar("ModelT", bound=Base)

logger = logging.getLogger(__name__)

# Retry configuration for SQLite lock contention
DB_RETRY_MAX_ATTEMPTS = 5
DB_RETRY_WAIT_MIN = 1  # seconds
DB_RETRY_WAIT_MAX = 8  # seconds
DB_RETRY_WAIT_MULTIPLIER = 2

OrderSpec = Sequence[tuple[str, str]]


def with_db_retry(func: Callable[P, R]) -> Callable[P, R]:
    """Decorator to retry database operations on SQLite lock errors.

    Retries on sqlalchemy.exc.OperationalError using exponential backoff.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        for attempt in Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(DB_RETRY_MAX_ATTEMPTS),
            wait=wait_exponential(
                multiplier=DB_RETRY_WAIT_MULTIPLIER,
                min=DB_RETRY_WAIT_MIN,
                max=DB_RETRY_WAIT_MAX,
            ),
            reraise=True,
        ):
            with attempt:
                return func(*args, **kwargs)
        raise RuntimeError("Retry logic failed unexpectedly")

    return wrapper


class StoreGateway:
    """Async access point to the store for repositories and workflows."""

    def __init__(
        self,
        engine: Engine,
        procedures: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        """Initialize gateway.

        Args:
            engine: SQLAlchemy engine of the store.
            procedures: Named store procedures. Defaults to the built-in set.
        """
        self._session_factory = make_session_factory(engine)
        self._procedures = dict(PROCEDURES if procedures is None else procedures)

    async def query(
        self,
        model: type[ModelT],
        filters: Mapping[str, Any] | None = None,
        joins: Sequence[str] = (),
        order_by: OrderSpec = (),
    ) -> list[ModelT]:
        """Select rows of ``model``.

        Args:
            model: ORM class to select.
            filters: Column name to value equality filters.
            joins: Relationship names to load with the rows. Many-to-one
                relationships use an inner join, so rows whose related record
                is missing are not returned.
            order_by: (column, "asc" | "desc") pairs applied in order.

        Returns:
            Matching rows, readable after the session has closed.
        """
        stmt = select(model)
        for name, value in (filters or {}).items():
            stmt = stmt.where(_column(model, name) == value)
        stmt = stmt.options(*(_load_option(model, name) for name in joins))
        for name, direction in order_by:
            if direction not in ("asc", "desc"):
                raise StoreError(f"Invalid sort direction: {direction!r}")
            order = asc if direction == "asc" else desc
            stmt = stmt.order_by(order(_column(model, name)))

        def work(session: Session) -> list[ModelT]:
            return list(session.scalars(stmt).unique().all())

        return await self._run(f"query {model.__tablename__}", work)

    async def update(self, model: type[Base], record_id: int, fields: Mapping[str, Any]) -> int:
        """Overwrite columns of one row.

        Returns:
            Number of rows updated (0 if the row does not exist).
        """
        for name in fields:
            _column(model, name)

        def work(session: Session) -> int:
            record = session.get(model, record_id)
            if record is None:
                return 0
            for name, value in fields.items():
                setattr(record, name, value)
            return 1

        return await self._run(f"update {model.__tablename__}", work)

    async def delete(self, model: type[Base], record_id: int) -> int:
        """Delete one row and the rows it owns.

        Returns:
            Number of rows deleted (0 if the row does not exist).
        """

        def work(session: Session) -> int:
            record = session.get(model, record_id)
            if record is None:
                return 0
            session.delete(record)
            return 1

        return await self._run(f"delete {model.__tablename__}", work)

    async def call_procedure(self, name: str, **args: Any) -> Any:
        """Run a named store procedure as one atomic transaction.

        Raises:
            StoreError: If the procedure is unknown, is called with arguments
                it does not accept, rejects the call, or the store fails.
                No partial effect remains in any case.
        """
        procedure = self._procedures.get(name)
        if procedure is None:
            raise StoreError(f"Unknown procedure: {name}")
        try:
            signature(procedure).bind(None, **args)
        except TypeError as e:
            raise StoreError(f"Invalid arguments for procedure {name}: {e}") from None
        return await self._run(f"procedure {name}", lambda session: procedure(session, **args))

    async def _run(self, label: str, work: Callable[[Session], R]) -> R:
        return await asyncio.to_thread(self._run_sync, label, work)

    def _run_sync(self, label: str, work: Callable[[Session], R]) -> R:
        try:
            return self._transaction(work)
        except StoreError:
            raise
        except SQLAlchemyError as e:
            logger.warning("Store %s failed: %s", label, e)
            raise StoreError(f"{label} failed: {e}") from e

    @with_db_retry
    def _transaction(self, work: Callable[[Session], R]) -> R:
        with self._session_factory.begin() as session:
            return work(session)


def _column(model: type[Base], name: str) -> Any:
    try:
        return model.__table__.c[name]
    except KeyError:
        raise StoreError(f"Unknown column {model.__tablename__}.{name}") from None


def _load_option(model: type[Base], name: str) -> Any:
    relationship = inspect(model).relationships.get(name)
    if relationship is None:
        raise StoreError(f"Unknown relationship {model.__tablename__}.{name}")
    attr = getattr(model, name)
    if relationship.uselist:
        return selectinload(attr)
    return joinedload(attr, innerjoin=True)
