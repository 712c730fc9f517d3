"""
authorization ledger

Per-client payer authorization: how many billable minutes are left and when
the authorization expires. Scheduling decisions read it; only committing (or
cancelling) a session changes it, through debit/credit below.

Invariant: 0 <= remaining_minutes <= authorized_minutes. Debits and credits
clamp instead of going out of range.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from carelane.schemas.scheduling import AuthorizationBalance, AuthorizationStatus

logger = logging.getLogger(__name__)


class AuthorizationLedger:
    def __init__(self, balances: Iterable[AuthorizationBalance] = ()):
        self._balances: dict[str, AuthorizationBalance] = {b.client_id: b for b in balances}

    def get(self, client_id: str) -> Optional[AuthorizationBalance]:
        return self._balances.get(client_id)

    def all(self) -> list[AuthorizationBalance]:
        return list(self._balances.values())

    def replace(self, balances: Iterable[AuthorizationBalance]) -> None:
        self._balances = {b.client_id: b for b in balances}

    def debit(self, client_id: str, minutes: int) -> Optional[AuthorizationBalance]:
        balance = self._balances.get(client_id)
        if balance is None:
            # no authorization on file: the session is non-billable, nothing to draw down
            return None

        remaining = max(0, balance.remaining_minutes - minutes)
        updated = balance.model_copy(update={"remaining_minutes": remaining})
        self._balances[client_id] = updated
        logger.info(
            "Debited %s min from %s authorization (%s -> %s remaining)",
            minutes,
            client_id,
            balance.remaining_minutes,
            remaining,
        )
        return updated

    def credit(self, client_id: str, minutes: int) -> Optional[AuthorizationBalance]:
        balance = self._balances.get(client_id)
        if balance is None:
            return None

        remaining = min(balance.authorized_minutes, balance.remaining_minutes + minutes)
        updated = balance.model_copy(update={"remaining_minutes": remaining})
        self._balances[client_id] = updated
        logger.info("Credited %s min back to %s authorization (%s remaining)", minutes, client_id, remaining)
        return updated


def covers_service(balance: Optional[AuthorizationBalance], service_code: str) -> bool:
    return balance is not None and service_code in balance.allowed_service_codes


def authorization_status(
    balance: Optional[AuthorizationBalance],
    session_end: datetime,
    duration_minutes: int,
) -> AuthorizationStatus:
    """
    Funding badge for one session.

    Checked in order: missing auth, expired before the session ends, nothing
    left, less than two sessions' worth left, fine.
    """
    if balance is None:
        return AuthorizationStatus(label="No auth", severity="error", helper="No authorization on file")

    if session_end.date() > balance.expires_on:
        return AuthorizationStatus(
            label="Auth expired",
            severity="error",
            helper=f"Expired {balance.expires_on.strftime('%b %d')}",
        )

    remaining = balance.remaining_minutes
    if remaining <= 0:
        return AuthorizationStatus(label="No units", severity="error", helper="0 minutes remain")

    if remaining < duration_minutes * 2:
        return AuthorizationStatus(label="Low auth", severity="warning", helper=f"{remaining} min remaining")

    return AuthorizationStatus(label="Auth OK", severity="success", helper=f"{remaining} min remaining")
