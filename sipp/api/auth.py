"""Per-operation credential checks applied at the HTTP boundary."""

from __future__ import annotations

import enum
import hmac
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from ..errors import Unauthorized

logger = logging.getLogger("sipp")

OP_LIST = "list"
OP_CREATE = "create"
OP_GET = "get"
OP_UPDATE = "update"
OP_DELETE = "delete"

OPERATIONS: FrozenSet[str] = frozenset({OP_LIST, OP_CREATE, OP_GET, OP_UPDATE, OP_DELETE})
DEFAULT_PROTECTED: FrozenSet[str] = frozenset({OP_DELETE, OP_LIST})


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


def parse_protected_operations(raw: str | None) -> FrozenSet[str]:
    """Parse a comma-separated list such as ``"api_list, api_delete"``.

    ``all`` and ``none`` are aggregate markers; ``none`` wins if both appear.
    An unset or blank value yields :data:`DEFAULT_PROTECTED`.
    """
    if raw is None or not raw.strip():
        return DEFAULT_PROTECTED
    return normalize_operations(raw.split(","))


def normalize_operations(names: Iterable[str]) -> FrozenSet[str]:
    selected: set[str] = set()
    wants_all = False
    for raw_name in names:
        name = raw_name.strip().lower()
        if not name:
            continue
        if name == "none":
            return frozenset()
        if name == "all":
            wants_all = True
            continue
        if name.startswith("api_"):
            name = name[len("api_"):]
        if name not in OPERATIONS:
            logger.warning("Ignoring unknown protected operation %r", raw_name.strip())
            continue
        selected.add(name)
    if wants_all:
        return OPERATIONS
    return frozenset(selected)


@dataclass(frozen=True, slots=True)
class AuthGate:
    """Decides whether a caller may run an operation.

    Without a configured secret every operation is allowed.
    """

    secret: str | None = None
    protected: FrozenSet[str] = field(default=DEFAULT_PROTECTED)

    @property
    def enabled(self) -> bool:
        return bool(self.secret)

    def is_protected(self, operation: str) -> bool:
        return self.enabled and operation in self.protected

    def authorize(self, operation: str, credential: str | None) -> Decision:
        if not self.is_protected(operation):
            return Decision.ALLOW
        if credential is None:
            return Decision.DENY
        supplied = credential.encode("utf-8")
        expected = self.secret.encode("utf-8")  # type: ignore[union-attr]
        if hmac.compare_digest(supplied, expected):
            return Decision.ALLOW
        return Decision.DENY

    def require(self, operation: str, credential: str | None) -> None:
        if self.authorize(operation, credential) is Decision.DENY:
            logger.warning("Denied %s request: %s", operation, "missing key" if credential is None else "bad key")
            raise Unauthorized()


__all__ = [
    "AuthGate",
    "DEFAULT_PROTECTED",
    "Decision",
    "OPERATIONS",
    "OP_CREATE",
    "OP_DELETE",
    "OP_GET",
    "OP_LIST",
    "OP_UPDATE",
    "normalize_operations",
    "parse_protected_operations",
]
