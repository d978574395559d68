"""
Authorization policy: pure predicates over a resolved identity.

identity is the Account resolved from the caller's session, or None for an
anonymous caller. No predicate performs I/O or mutates anything.
"""

from dataclasses import dataclass
from typing import Literal

from portal.errors import Forbidden, Unauthenticated
from portal.schemas.accounts import Account

DenialReason = Literal["unauthenticated", "forbidden"]


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check."""

    allowed: bool
    reason: DenialReason | None = None
    message: str = ""

    def __bool__(self) -> bool:
        return self.allowed

    def raise_for_denial(self) -> None:
        """Raise Unauthenticated or Forbidden if the decision is a denial."""
        if self.allowed:
            return
        if self.reason == "unauthenticated":
            raise Unauthenticated(self.message or "Authentication required.")
        raise Forbidden(self.message or "Access denied.")


ALLOW = Decision(allowed=True)


def _unauthenticated() -> Decision:
    return Decision(allowed=False, reason="unauthenticated", message="Authentication required.")


def require_authenticated(identity: Account | None) -> Decision:
    if identity is None:
        return _unauthenticated()
    return ALLOW


def require_admin(identity: Account | None) -> Decision:
    """Allow only administrators. Anonymous callers are denied as unauthenticated."""
    if identity is None:
        return _unauthenticated()
    if not identity.is_admin:
        return Decision(allowed=False, reason="forbidden", message="Administrator access required.")
    return ALLOW


def require_owner_or_admin(identity: Account | None, resource_owner_id: int) -> Decision:
    """Allow administrators and the account whose id is stamped on the resource."""
    if identity is None:
        return _unauthenticated()
    if identity.is_admin or identity.id == resource_owner_id:
        return ALLOW
    return Decision(
        allowed=False,
        reason="forbidden",
        message="You do not have permission to modify this resource.",
    )
