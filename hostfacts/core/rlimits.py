"""
Process resource limits.

One table row per limit drives the whole query: the OS resource id and
the accessor that stores the current/max pair in ``ResourceLimit``.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Tuple

from .models import FIELD_NOTIMPL, ResourceLimit

if os.name == "posix":
    import resource
else:
    resource = None


logger = logging.getLogger(__name__)

RLIMIT_UNSUPPORTED = -1


def _rlimit_id(name: str) -> int:
    if resource is None:
        return RLIMIT_UNSUPPORTED
    return getattr(resource, name, RLIMIT_UNSUPPORTED)


def _setter(field: str) -> Callable[[ResourceLimit, int, int], None]:
    def set_limit(limit: ResourceLimit, cur: int, max_: int):
        setattr(limit, f"{field}_cur", cur)
        setattr(limit, f"{field}_max", max_)
    return set_limit


@dataclass(frozen=True)
class RlimitFieldSpec:
    """Maps one logical limit to its OS resource id and output fields."""

    name: str
    resource: int
    set: Callable[[ResourceLimit, int, int], None]

    @property
    def supported(self) -> bool:
        return self.resource != RLIMIT_UNSUPPORTED


def _row(name: str, rlimit: str) -> RlimitFieldSpec:
    return RlimitFieldSpec(name, _rlimit_id(rlimit), _setter(name))


RLIMIT_TABLE: Tuple[RlimitFieldSpec, ...] = (
    _row("cpu", "RLIMIT_CPU"),
    _row("file_size", "RLIMIT_FSIZE"),
    _row("data", "RLIMIT_DATA"),
    _row("stack", "RLIMIT_STACK"),
    _row("core", "RLIMIT_CORE"),
    _row("memory", "RLIMIT_RSS"),
    _row("processes", "RLIMIT_NPROC"),
    _row("open_files", "RLIMIT_NOFILE"),
    _row("virtual_memory", "RLIMIT_AS"),
)


def get_resource_limit(context, table: Tuple[RlimitFieldSpec, ...] = RLIMIT_TABLE) -> ResourceLimit:
    """
    Read every resource limit of the current process.

    Unsupported or failing limits report ``FIELD_NOTIMPL`` for both values.
    """
    backend = context.backend
    limit = ResourceLimit(unlimited=backend.rlimit_infinity())

    for spec in table:
        cur = max_ = FIELD_NOTIMPL
        if spec.supported:
            try:
                cur, max_ = backend.getrlimit(spec.resource)
            except (OSError, ValueError) as e:
                logger.debug(f"getrlimit({spec.name}) failed: {e}")
        spec.set(limit, cur, max_)

    return limit
