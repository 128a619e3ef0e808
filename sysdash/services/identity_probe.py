import logging
from typing import Callable, Optional

from sysdash.models.identity import UNKNOWN, HostIdentity
from sysdash.services.host_query import (
    COMPUTER_SYSTEM,
    MODEL,
    NAME,
    PROCESSOR,
    TOTAL_PHYSICAL_MEMORY,
    VIDEO_CONTROLLER,
    QuerySource,
    default_query_source,
)
from sysdash.services.os_identity import OsIdentity, default_os_identity

logger = logging.getLogger(__name__)

_BYTES_PER_GIB = 1024**3


class IdentityProbe:
    """
    Resolve the static host facts exactly once, at construction.

    Every field is queried independently and sequentially. A failing query
    degrades only its own field to "Unknown" (0.0 for RAM); construction
    itself never fails and nothing is retried.
    """

    def __init__(
        self,
        source: Optional[QuerySource] = None,
        os_identity: Optional[OsIdentity] = None,
    ) -> None:
        self._source = source or default_query_source()
        self._os_identity = os_identity or default_os_identity()

        self.identity = HostIdentity(
            os=self._resolve_os("name", self._os_identity.name),
            version=self._resolve_os("version", self._os_identity.version),
            model=self.resolve_field(COMPUTER_SYSTEM, MODEL),
            cpu=self.resolve_field(PROCESSOR, NAME),
            gpu=self.resolve_field(VIDEO_CONTROLLER, NAME),
            ram_gb=self.resolve_total_ram(),
        )

    def _resolve_os(self, what: str, getter: Callable[[], str]) -> str:
        try:
            value = getter()
        except Exception as exc:
            logger.warning("Could not resolve OS %s: %s", what, exc)
            return UNKNOWN
        return str(value) if value else UNKNOWN

    def resolve_field(self, object_class: str, prop: str) -> str:
        """
        Return the first row's value of ``object_class.prop`` as a string.

        Falls back to "Unknown" if the query raises, returns no rows or the
        value is missing.
        """
        try:
            rows = self._source.query(object_class, prop)
        except Exception as exc:
            logger.warning("Query %s.%s failed: %s", object_class, prop, exc)
            return UNKNOWN

        if not rows or rows[0] is None:
            logger.warning("Query %s.%s returned no value", object_class, prop)
            return UNKNOWN
        return str(rows[0])

    def resolve_total_ram(self) -> float:
        """
        Sum total physical memory across all reported rows and convert to GiB.

        Some reporting layers return one row per memory bank, hence the sum.
        Returns 0.0 on any failure.
        """
        try:
            rows = self._source.query(COMPUTER_SYSTEM, TOTAL_PHYSICAL_MEMORY)
            total = sum(float(row) for row in rows)
            if total < 0:
                raise ValueError(f"negative memory total {total}")
        except Exception as exc:
            logger.warning("Could not resolve total RAM: %s", exc)
            return 0.0
        return round(total / _BYTES_PER_GIB, 2)
