# backend/care_companion/models/care.py

import math
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from care_companion.core.config import settings


def unique_slots(timings: List[str]) -> List[str]:
    """Drop repeated slot names, keeping the first occurrence."""
    return list(dict.fromkeys(timings))


class DoseStatus(str, Enum):
    PENDING = "pending"
    TAKEN = "taken"
    MISSED = "missed"


class Interaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    severity: Literal["high", "medium"]
    summary: str
    detail: str


class ExtractedMedicine(BaseModel):
    """One record as returned by the extraction model, before it gets an id."""

    name: str
    dosage: str = ""
    frequency: str = ""
    timings: List[str] = []
    durationDays: Optional[int] = None

    @field_validator("timings")
    @classmethod
    def drop_repeated_slots(cls, v: List[str]) -> List[str]:
        return unique_slots(v)

    @field_validator("durationDays", mode="before")
    @classmethod
    def whole_positive_days(cls, v):
        # partial days round up; anything unusable or non-positive counts as unknown
        if v is None or isinstance(v, bool):
            return None
        try:
            days = float(v)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(days) or days <= 0:
            return None
        return math.ceil(days)


class Medicine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    dosage: str = ""
    frequency: str = ""
    timings: List[str] = []
    durationDays: int = Field(settings.DEFAULT_DURATION_DAYS, gt=0)
    potentialInteractions: Optional[Interaction] = None

    @field_validator("timings")
    @classmethod
    def drop_repeated_slots(cls, v: List[str]) -> List[str]:
        return unique_slots(v)


class Dose(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    medicineId: str
    medicineName: str
    date: str  # YYYY-MM-DD
    timeSlot: str
    status: DoseStatus = DoseStatus.PENDING


class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    medicineName: str
    timeSlot: str
    date: str  # date of the dose
    timestamp: str  # when the change happened
    status: DoseStatus


class CareState(BaseModel):
    model_config = ConfigDict(frozen=True)

    medicines: List[Medicine] = []
    doses: List[Dose] = []
    history: List[HistoryEntry] = []
    remedies: List[str] = []
    lastExtractionDate: Optional[str] = None
