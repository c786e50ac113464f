"""
Audit logging of PSP exchanges.

Every request to and from MultiSafepay produces exactly one AuditLogEntry.
Callers open a pending entry with ``AuditTrail.pending()``, fill in what they
learn, and the entry is flushed when the scope exits, however it exits.
"""
from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, AsyncIterator, List, Optional

from sardis_multisafepay.models import AuditDirection, AuditLogEntry
from sardis_multisafepay.logging import mask_sensitive_data

logger = logging.getLogger(__name__)


def serialize_body(body: Any) -> Optional[str]:
    """Serialize a request/response body for storage, keeping None as None."""
    if body is None:
        return None
    return json.dumps(body, default=str, sort_keys=True)


class AuditLogSink(ABC):
    """Abstract append-only store for audit entries."""

    @abstractmethod
    async def write(self, entry: AuditLogEntry) -> None:
        """Append one entry."""
        pass


class InMemoryAuditLogSink(AuditLogSink):
    """
    In-memory audit sink for development and testing.

    Note: This sink is not suitable for production use; entries are lost on
    restart.
    """

    def __init__(self, max_entries: int = 100000):
        self._entries: List[AuditLogEntry] = []
        self._max_entries = max_entries
        self._lock = asyncio.Lock()

    async def write(self, entry: AuditLogEntry) -> None:
        async with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self._max_entries:
                self._entries = self._entries[-self._max_entries:]

    async def query(
        self,
        correlation_id: Optional[str] = None,
        direction: Optional[AuditDirection] = None,
    ) -> List[AuditLogEntry]:
        async with self._lock:
            return [
                entry
                for entry in self._entries
                if (correlation_id is None or entry.correlation_id == correlation_id)
                and (direction is None or entry.direction == direction)
            ]

    @property
    def entries(self) -> List[AuditLogEntry]:
        return list(self._entries)


class LoggingAuditLogSink(AuditLogSink):
    """Audit sink that writes masked entries to a logger."""

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level

    async def write(self, entry: AuditLogEntry) -> None:
        data = mask_sensitive_data(asdict(entry))
        logger.log(
            self._log_level,
            "PSP exchange: psp=%s correlation_id=%s direction=%s status=%s error=%s",
            data["psp_name"],
            data["correlation_id"],
            entry.direction.value,
            data["status_code"],
            data["error"],
            extra={"audit": data},
        )


class CompositeAuditLogSink(AuditLogSink):
    """Audit sink that writes to multiple sinks."""

    def __init__(self, sinks: List[AuditLogSink]):
        self._sinks = sinks

    async def write(self, entry: AuditLogEntry) -> None:
        results = await asyncio.gather(
            *[sink.write(entry) for sink in self._sinks],
            return_exceptions=True,
        )
        for sink, result in zip(self._sinks, results):
            if isinstance(result, Exception):
                logger.error(
                    "Audit sink %s failed: %s", type(sink).__name__, result
                )


class AuditTrail:
    """Opens pending audit entries that are always flushed to the sink."""

    def __init__(self, sink: AuditLogSink, psp_name: str):
        self.sink = sink
        self.psp_name = psp_name

    @asynccontextmanager
    async def pending(
        self,
        correlation_id: str,
        direction: AuditDirection,
    ) -> AsyncIterator[AuditLogEntry]:
        """
        Yield an entry to fill in; it is written when the block exits.

        The entry is flushed on normal exit, early return and exceptions
        alike. Sink failures are logged, never raised, so auditing cannot
        change the outcome of the exchange being audited.
        """
        entry = AuditLogEntry(
            psp_name=self.psp_name,
            correlation_id=correlation_id,
            direction=direction,
        )
        try:
            yield entry
        finally:
            await self._flush(entry)

    async def _flush(self, entry: AuditLogEntry) -> None:
        try:
            await self.sink.write(entry)
        except Exception:
            logger.exception(
                "Failed to write audit entry for %s (%s)",
                entry.correlation_id,
                entry.direction.value,
            )
