"""Authorization decisions for account-scoped operations (owner or admin)."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from accountkit.core.errors import ForbiddenError, NotAuthenticatedError, NotFoundError
from accountkit.models import Account
from accountkit.schemas.auth import Caller

if TYPE_CHECKING:
    from accountkit.services.account_store import AccountStore

logger = logging.getLogger(__name__)


class Decision(str, enum.Enum):
    ALLOW = "allow"
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


def is_owner(caller: Caller, target_id: str) -> bool:
    return caller.account_id == target_id


def is_admin(caller: Caller) -> bool:
    return caller.is_admin


def decide(caller: Caller | None, target_id: str, *, target_exists: bool) -> Decision:
    """
    Owner-or-admin rule for one target account.

    Order: missing caller, then missing target, then ownership/role.
    """
    if caller is None:
        return Decision.NOT_AUTHENTICATED
    if not target_exists:
        return Decision.NOT_FOUND
    if is_owner(caller, target_id) or is_admin(caller):
        return Decision.ALLOW
    return Decision.FORBIDDEN


def decide_admin_only(caller: Caller | None) -> Decision:
    """Admin rule with no ownership fallback (e.g. listing all accounts)."""
    if caller is None:
        return Decision.NOT_AUTHENTICATED
    return Decision.ALLOW if is_admin(caller) else Decision.FORBIDDEN


def _raise_for(decision: Decision) -> None:
    if decision is Decision.NOT_AUTHENTICATED:
        raise NotAuthenticatedError()
    if decision is Decision.NOT_FOUND:
        raise NotFoundError()
    if decision is Decision.FORBIDDEN:
        raise ForbiddenError()


class AccessGuard:
    """Applies the decision functions against the account store and raises on DENY."""

    def __init__(self, store: "AccountStore") -> None:
        self.store = store

    def authorize(self, caller: Caller | None, target_id: str) -> Account:
        """Return the target account if the caller owns it or is an admin."""
        if caller is None:
            _raise_for(Decision.NOT_AUTHENTICATED)
        target = self.store.find_by_id(target_id)
        decision = decide(caller, target_id, target_exists=target is not None)
        if decision is not Decision.ALLOW:
            logger.info(
                "Access denied: caller=%s target=%s reason=%s",
                caller.account_id,
                target_id,
                decision.value,
            )
            _raise_for(decision)
        return target

    def require_admin(self, caller: Caller | None) -> Caller:
        decision = decide_admin_only(caller)
        if decision is not Decision.ALLOW:
            logger.info(
                "Admin access denied: caller=%s reason=%s",
                caller.account_id if caller else None,
                decision.value,
            )
            _raise_for(decision)
        return caller
