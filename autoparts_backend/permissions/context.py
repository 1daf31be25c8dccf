# permissions/context.py

"""
OPERATOR CONTEXT

Explicit "who is doing this" value handed to every service that mutates
state or attributes an operator. Built once per request; services never
read request/session state on their own.

GUARANTEES:
- Immutable once built
- Capabilities resolved from role at build time
- require() raises PermissionDenied (mapped to 403 by DRF)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from django.core.exceptions import PermissionDenied

from permissions.roles import capabilities_for_user, get_user_role


@dataclass(frozen=True)
class OperatorContext:
    user: object
    role: Optional[str] = None
    capabilities: frozenset = field(default_factory=frozenset)

    @classmethod
    def for_user(cls, user) -> "OperatorContext":
        if user is None or not getattr(user, "is_authenticated", False):
            raise PermissionDenied("An authenticated operator is required.")
        return cls(
            user=user,
            role=get_user_role(user),
            capabilities=frozenset(capabilities_for_user(user)),
        )

    @classmethod
    def from_request(cls, request) -> "OperatorContext":
        return cls.for_user(getattr(request, "user", None))

    @property
    def user_id(self):
        return getattr(self.user, "pk", None)

    def can(self, capability: str) -> bool:
        return capability in self.capabilities

    def require(self, capability: str) -> None:
        if capability not in self.capabilities:
            raise PermissionDenied(
                f"Operator lacks capability '{capability}'."
            )
