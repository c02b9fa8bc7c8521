# backend/care_companion/services/schedule.py

from datetime import date, timedelta
from typing import Iterable, List

from care_companion.core.config import settings
from care_companion.models.care import Dose, DoseStatus, Medicine


def dose_id(medicine_id: str, day: str, slot: str) -> str:
    """
    Identity of the dose for one medicine, ISO date and time slot.
    The same triple always maps to the same id, so regenerating a
    schedule never yields a second identity for the same slot.

    Dashes (and percent signs) in the slot are escaped, so the last dash
    always separates the slot and the ten characters before it are the
    date; distinct triples therefore never share an id.
    """
    escaped = slot.replace("%", "%25").replace("-", "%2D")
    return f"{medicine_id}-{day}-{escaped}"


def generate_schedule(
    medicines: Iterable[Medicine],
    today: date,
    horizon_days: int = settings.SCHEDULE_HORIZON_DAYS,
) -> List[Dose]:
    """
    Pending doses for every declared slot of every medicine over
    `horizon_days` consecutive days starting at `today`.

    Ordering is by medicine (input order), then day, then slot declaration
    order. `durationDays` is not consulted; the horizon is fixed.
    """
    days = [(today + timedelta(days=offset)).isoformat() for offset in range(horizon_days)]

    doses: List[Dose] = []
    for med in medicines:
        for day in days:
            for slot in med.timings:
                doses.append(
                    Dose(
                        id=dose_id(med.id, day, slot),
                        medicineId=med.id,
                        medicineName=med.name,
                        date=day,
                        timeSlot=slot,
                        status=DoseStatus.PENDING,
                    )
                )
    return doses
