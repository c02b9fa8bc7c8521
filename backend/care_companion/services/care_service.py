# backend/care_companion/services/care_service.py

import logging
from typing import Optional

from pydantic import BaseModel

from care_companion.services.ai_service import CareAI
from care_companion.services.care_store import CareStore
from care_companion.services.errors import ExtractionError, InteractionCheckError

logger = logging.getLogger(__name__)

NOTHING_EXTRACTED = "I couldn't find any clear medicine details."


class OperationResult(BaseModel):
    success: bool
    message: Optional[str] = None
    count: int = 0


def extract_and_schedule(
    store: CareStore, ai: CareAI, image_bytes: bytes, mime_type: str = "image/jpeg"
) -> OperationResult:
    """
    Extract medicines from a prescription image and schedule them.
    The store is left untouched unless at least one medicine came back.
    """
    try:
        medicines = ai.parse_prescription(image_bytes, mime_type)
    except ExtractionError as e:
        logger.error("Extraction failed: %s", e)
        return OperationResult(success=False, message=NOTHING_EXTRACTED)

    if not medicines:
        return OperationResult(success=False, message=NOTHING_EXTRACTED)

    store.generate_schedule(medicines)
    return OperationResult(
        success=True,
        message=f"Schedule updated with {len(medicines)} items!",
        count=len(medicines),
    )


def run_interaction_check(store: CareStore, ai: CareAI) -> OperationResult:
    state = store.state
    try:
        interactions = ai.check_interactions(state.medicines, state.remedies)
    except InteractionCheckError as e:
        logger.error("Interaction check failed: %s", e)
        return OperationResult(success=False, message="Failed to check interactions.")

    store.update_interactions(interactions)
    count = len(interactions)
    if count:
        return OperationResult(success=True, message=f"Caution: Found {count} potential interactions.", count=count)
    return OperationResult(success=True, message="No critical interactions found.")
