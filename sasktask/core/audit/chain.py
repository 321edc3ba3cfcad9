"""Hash-chain verification for booking audit trails."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pydantic import BaseModel


class ChainedEvent(Protocol):
    event_hash: str | None
    previous_hash: str | None


class ChainVerification(BaseModel):
    intact: bool
    event_count: int
    broken_at: int | None = None


def verify_audit_chain(events: Sequence[ChainedEvent]) -> ChainVerification:
    """Check that every event links to its predecessor.

    ``events`` must be in creation order. ``broken_at`` is the index of the
    first event whose ``previous_hash`` differs from the prior ``event_hash``.
    """
    for i in range(1, len(events)):
        if events[i].previous_hash != events[i - 1].event_hash:
            return ChainVerification(intact=False, event_count=len(events), broken_at=i)
    return ChainVerification(intact=True, event_count=len(events))
