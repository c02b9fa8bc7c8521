# backend/care_companion/services/care_store.py

import logging
import math
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from care_companion.core.config import settings
from care_companion.models.care import CareState, Dose, DoseStatus, Interaction, Medicine
from care_companion.services.dose_state import apply_transition
from care_companion.services.errors import StorageError
from care_companion.services.history import HistoryLedger
from care_companion.services.schedule import generate_schedule
from care_companion.services.storage import StoragePort

logger = logging.getLogger(__name__)

Listener = Callable[[CareState], None]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CareStore:
    """
    Owns the CareState of the process.

    Every mutation builds a complete new snapshot, swaps it in, writes it
    to the storage port and then notifies subscribers. Operations never
    raise: unknown ids are ignored and storage failures are logged.
    """

    def __init__(
        self,
        storage: StoragePort,
        clock: Clock = utc_now,
        horizon_days: int = settings.SCHEDULE_HORIZON_DAYS,
        history_limit: int = settings.HISTORY_LIMIT,
    ):
        self._storage = storage
        self._clock = clock
        self._horizon_days = horizon_days
        self._listeners: List[Listener] = []

        self._state = self._rehydrate()
        self._ledger = HistoryLedger(self._state.history, limit=history_limit)
        if len(self._ledger) != len(self._state.history):
            self._state = self._state.model_copy(update={"history": self._ledger.entries()})

    def _rehydrate(self) -> CareState:
        try:
            data = self._storage.load()
        except StorageError as e:
            logger.error("Could not load care state, starting empty: %s", e)
            return CareState()
        if data is None:
            return CareState()
        try:
            return CareState.model_validate(data)
        except ValidationError as e:
            logger.warning("Discarding incompatible care state blob: %s", e)
            return CareState()

    @property
    def state(self) -> CareState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, state: CareState, ledger: Optional[HistoryLedger] = None) -> None:
        self._state = state
        if ledger is not None:
            self._ledger = ledger

        try:
            self._storage.save(state.model_dump(mode="json"))
        except StorageError:
            logger.exception("Failed to persist care state")

        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Care state listener %r failed", listener)

    # ---- mutations ----

    def add_medicines(self, medicines: Iterable[Medicine]) -> None:
        self._commit(self._state.model_copy(update={"medicines": [*self._state.medicines, *medicines]}))

    def generate_schedule(self, medicines: Iterable[Medicine]) -> None:
        medicines = list(medicines)
        now = self._clock()
        new_doses = generate_schedule(medicines, now.date(), self._horizon_days)
        logger.info("Scheduled %d doses for %d medicines", len(new_doses), len(medicines))
        self._commit(
            self._state.model_copy(
                update={
                    "medicines": [*self._state.medicines, *medicines],
                    "doses": [*self._state.doses, *new_doses],
                    "lastExtractionDate": now.isoformat(),
                }
            )
        )

    def toggle_dose(self, dose_id: str, status: DoseStatus) -> None:
        transition = apply_transition(self._state.doses, self._ledger, dose_id, status, self._clock())
        if transition is None:
            return
        self._commit(
            self._state.model_copy(
                update={"doses": transition.doses, "history": transition.history.entries()}
            ),
            ledger=transition.history,
        )

    def flip_dose(self, dose_id: str, status: DoseStatus) -> None:
        """Mark a dose with `status`, or back to pending if it already has it."""
        dose = self.find_dose(dose_id)
        if dose is None:
            return
        status = DoseStatus(status)
        self.toggle_dose(dose_id, DoseStatus.PENDING if dose.status == status else status)

    def add_remedy(self, name: str) -> None:
        if name in self._state.remedies:
            return
        self._commit(self._state.model_copy(update={"remedies": [*self._state.remedies, name]}))

    def remove_remedy(self, name: str) -> None:
        if name not in self._state.remedies:
            return
        self._commit(
            self._state.model_copy(update={"remedies": [r for r in self._state.remedies if r != name]})
        )

    def update_interactions(self, interactions: Dict[str, Interaction]) -> None:
        medicines = [
            med.model_copy(update={"potentialInteractions": interactions.get(med.id)})
            for med in self._state.medicines
        ]
        self._commit(self._state.model_copy(update={"medicines": medicines}))

    def clear_all(self) -> None:
        self._commit(CareState(), ledger=HistoryLedger(limit=self._ledger.limit))

    # ---- queries ----

    def find_dose(self, dose_id: str) -> Optional[Dose]:
        return next((d for d in self._state.doses if d.id == dose_id), None)

    def doses_for(self, day: date) -> List[Dose]:
        iso = day.isoformat()
        return [d for d in self._state.doses if d.date == iso]

    def schedule_dates(self) -> List[str]:
        return sorted({d.date for d in self._state.doses})

    def daily_progress(self, day: date) -> int:
        doses = self.doses_for(day)
        if not doses:
            return 0
        taken = sum(1 for d in doses if d.status == DoseStatus.TAKEN)
        return math.floor(taken * 100 / len(doses) + 0.5)

    def today(self) -> date:
        return self._clock().date()
