"""Status vocabularies and classification for Strato resources.

Every poll of a cluster or node pool yields a raw status string. The
classifier maps it to one of four classes that drive the convergence loop:

    PENDING  - server still working, keep polling
    READY    - terminal success
    FAILED   - terminal error reported by the server
    UNKNOWN  - a value we don't recognize; treated as a terminal error

Example:
    >>> classify(ResourceKind.NODE_POOL, "RESIZING")
    <StatusClass.PENDING: 'pending'>
    >>> classify(ResourceKind.CLUSTER, "SOMETHING_NEW")
    <StatusClass.UNKNOWN: 'unknown'>
"""

from __future__ import annotations

from enum import Enum, StrEnum
from types import MappingProxyType
from typing import Final

# =============================================================================
# Vocabularies
# =============================================================================


class ResourceKind(Enum):
    """Managed resource kinds. Each one has its own status vocabulary."""

    CLUSTER = "cluster"
    NODE_POOL = "node pool"


class StatusClass(Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def terminal(self) -> bool:
        return self is not StatusClass.PENDING


class ClusterStatus(StrEnum):
    IN_PROGRESS = "IN_PROGRESS"
    DELETING = "DELETING"
    ERROR = "ERROR"
    READY = "READY"


class NodePoolStatus(StrEnum):
    CREATING = "CREATING"
    RESIZING = "RESIZING"
    DELETING = "DELETING"
    ERROR = "ERROR"
    READY = "READY"


_TABLES: Final = MappingProxyType({
    ResourceKind.CLUSTER: MappingProxyType({
        ClusterStatus.IN_PROGRESS: StatusClass.PENDING,
        ClusterStatus.DELETING: StatusClass.PENDING,
        ClusterStatus.ERROR: StatusClass.FAILED,
        ClusterStatus.READY: StatusClass.READY,
    }),
    ResourceKind.NODE_POOL: MappingProxyType({
        NodePoolStatus.CREATING: StatusClass.PENDING,
        NodePoolStatus.RESIZING: StatusClass.PENDING,
        NodePoolStatus.DELETING: StatusClass.PENDING,
        NodePoolStatus.ERROR: StatusClass.FAILED,
        NodePoolStatus.READY: StatusClass.READY,
    }),
})

_TEARDOWN: Final = MappingProxyType({
    ResourceKind.CLUSTER: ClusterStatus.DELETING,
    ResourceKind.NODE_POOL: NodePoolStatus.DELETING,
})

# Wording for pending statuses; everything else uses "is in <x> state".
_PENDING_PHRASES: Final = MappingProxyType({
    ClusterStatus.IN_PROGRESS: "is in progress",
    NodePoolStatus.CREATING: "is creating",
    NodePoolStatus.RESIZING: "is resizing",
})


# =============================================================================
# Classification
# =============================================================================


def classify(kind: ResourceKind, status: str | None) -> StatusClass:
    """Map a raw status string to its class for the given resource kind.

    Total over all strings: anything outside the kind's vocabulary,
    including None and the empty string, is UNKNOWN.
    """
    if not status:
        return StatusClass.UNKNOWN
    return _TABLES[kind].get(status, StatusClass.UNKNOWN)


def is_teardown(kind: ResourceKind, status: str | None) -> bool:
    """True when status says the resource is being deleted.

    The classifier reports this as PENDING. Whether that is worth waiting
    for depends on what the caller asked for: a delete is waiting for
    exactly this, a create or resize is not.
    """
    return status == _TEARDOWN[kind]


def describe(kind: ResourceKind, status: str | None) -> str:
    """Human readable diagnostic, e.g. ``"node pool is resizing"``."""
    match classify(kind, status):
        case StatusClass.UNKNOWN:
            return f"{kind.value} is in unknown state ({status or 'empty'})"
        case StatusClass.FAILED:
            return f"{kind.value} is in error state"
        case StatusClass.READY:
            return f"{kind.value} is ready"
        case StatusClass.PENDING:
            pending = status or ""
            phrase = _PENDING_PHRASES.get(pending, f"is in {pending.lower()} state")
            return f"{kind.value} {phrase}"


__all__ = [
    "ClusterStatus",
    "NodePoolStatus",
    "ResourceKind",
    "StatusClass",
    "classify",
    "describe",
    "is_teardown",
]
