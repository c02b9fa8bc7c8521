"""Pydantic models for the care companion service."""

from .care import (
    CareState,
    Dose,
    DoseStatus,
    ExtractedMedicine,
    HistoryEntry,
    Interaction,
    Medicine,
)

__all__ = [
    "CareState",
    "Dose",
    "DoseStatus",
    "ExtractedMedicine",
    "HistoryEntry",
    "Interaction",
    "Medicine",
]
