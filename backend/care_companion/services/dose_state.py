# backend/care_companion/services/dose_state.py

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import uuid4

from care_companion.models.care import Dose, DoseStatus, HistoryEntry
from care_companion.services.history import HistoryLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    doses: List[Dose]
    history: HistoryLedger
    entry: HistoryEntry


def history_entry_id(now: datetime) -> str:
    return f"hist-{int(now.timestamp() * 1000)}-{uuid4().hex[:9]}"


def apply_transition(
    doses: Sequence[Dose],
    history: HistoryLedger,
    dose_id: str,
    new_status: DoseStatus,
    now: datetime,
) -> Optional[Transition]:
    """
    Set the status of one dose and record the change.

    Returns None when the dose is unknown or already has `new_status`;
    nothing is recorded in that case. Otherwise returns the new dose list
    and a new ledger holding the entry. Neither input is modified, so the
    caller can commit both together or not at all.
    """
    new_status = DoseStatus(new_status)
    target = next((d for d in doses if d.id == dose_id), None)
    if target is None:
        logger.debug("Ignoring transition for unknown dose %s", dose_id)
        return None
    if target.status == new_status:
        return None

    entry = HistoryEntry(
        id=history_entry_id(now),
        medicineName=target.medicineName,
        timeSlot=target.timeSlot,
        date=target.date,
        timestamp=now.isoformat(),
        status=new_status,
    )
    updated = target.model_copy(update={"status": new_status})
    ledger = history.copy()
    ledger.record(entry)

    logger.debug("Dose %s: %s -> %s", dose_id, target.status.value, new_status.value)
    return Transition(
        doses=[updated if d.id == dose_id else d for d in doses],
        history=ledger,
        entry=entry,
    )
