"""Access to the ``analytics_events`` table.

The store is the only I/O boundary of the analytics package. It supports
equality filters on type/user/session, a ``[start, end)`` timestamp range,
ordering by timestamp and a head-only count. None of its methods raise:
failures are logged and reported through ``StoreResult`` with the zero
default (``[]`` or ``0``) as value.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Protocol, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from printdesk.core.results import StoreResult
from printdesk.models.event import AnalyticsEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class EventFilter:
    event_type: str | None = None
    user_id: str | uuid.UUID | None = None
    session_id: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    ascending: bool = True
    limit: int | None = None


class EventStore(Protocol):
    async def insert(self, row: dict[str, Any]) -> StoreResult[None]: ...

    async def query(self, flt: EventFilter) -> StoreResult[list[dict[str, Any]]]: ...

    async def count(self, flt: EventFilter) -> StoreResult[int]: ...


def event_to_row(event: AnalyticsEvent) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "event_type": event.event_type,
        "event_data": event.event_data or {},
        "user_id": str(event.user_id) if event.user_id else None,
        "session_id": event.session_id,
        "timestamp": event.timestamp.isoformat() if event.timestamp else None,
        "user_agent": event.user_agent,
        "ip_address": event.ip_address,
    }


def _coerce_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _coerce_uuid(value: str | uuid.UUID | None) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


class SqlEventStore:
    """SQLAlchemy-backed event store.

    Parameters
    ----------
    session_factory : async_sessionmaker
        Factory producing one ``AsyncSession`` per call.
    timeout : float | None
        Upper bound in seconds for each call. ``None`` waits indefinitely.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def insert(self, row: dict[str, Any]) -> StoreResult[None]:
        try:
            await self._bounded(self._insert(row))
        except Exception as exc:
            logger.exception("Error inserting analytics event of type %s", row.get("event_type"))
            return StoreResult.failure(exc, None)
        return StoreResult.success(None)

    async def query(self, flt: EventFilter) -> StoreResult[list[dict[str, Any]]]:
        try:
            rows = await self._bounded(self._query(flt))
        except Exception as exc:
            logger.exception("Error querying analytics events (%s)", flt)
            return StoreResult.failure(exc, [])
        return StoreResult.success(rows)

    async def count(self, flt: EventFilter) -> StoreResult[int]:
        try:
            total = await self._bounded(self._count(flt))
        except Exception as exc:
            logger.exception("Error counting analytics events (%s)", flt)
            return StoreResult.failure(exc, 0)
        return StoreResult.success(total)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _bounded(self, coro: Awaitable[T]) -> T:
        if self.timeout is None:
            return await coro
        return await asyncio.wait_for(coro, timeout=self.timeout)

    async def _insert(self, row: dict[str, Any]) -> None:
        event = AnalyticsEvent(
            event_type=row["event_type"],
            event_data=row.get("event_data") or {},
            user_id=_coerce_uuid(row.get("user_id")),
            session_id=row["session_id"],
            timestamp=_coerce_timestamp(row["timestamp"]),
            user_agent=row.get("user_agent"),
            ip_address=row.get("ip_address"),
        )
        async with self.session_factory() as session:
            session.add(event)
            await session.commit()

    async def _query(self, flt: EventFilter) -> list[dict[str, Any]]:
        order = AnalyticsEvent.timestamp.asc() if flt.ascending else AnalyticsEvent.timestamp.desc()
        stmt = apply_filter(select(AnalyticsEvent), flt).order_by(order)
        if flt.limit is not None:
            stmt = stmt.limit(flt.limit)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [event_to_row(ev) for ev in result.scalars().all()]

    async def _count(self, flt: EventFilter) -> int:
        stmt = apply_filter(select(func.count()).select_from(AnalyticsEvent), flt)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one() or 0)


def apply_filter(stmt: Select, flt: EventFilter) -> Select:
    """Attach the WHERE clauses described by ``flt`` to ``stmt``."""
    if flt.event_type is not None:
        stmt = stmt.where(AnalyticsEvent.event_type == flt.event_type)
    if flt.user_id is not None:
        stmt = stmt.where(AnalyticsEvent.user_id == _coerce_uuid(flt.user_id))
    if flt.session_id is not None:
        stmt = stmt.where(AnalyticsEvent.session_id == flt.session_id)
    if flt.start is not None:
        stmt = stmt.where(AnalyticsEvent.timestamp >= flt.start)
    if flt.end is not None:
        stmt = stmt.where(AnalyticsEvent.timestamp < flt.end)
    return stmt
