# backend/care_companion/services/ai_service.py

import base64
import json
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from openai import AzureOpenAI, OpenAIError
from pydantic import ValidationError

from care_companion.core.config import settings
from care_companion.models.care import ExtractedMedicine, Interaction, Medicine
from care_companion.services.errors import ExtractionError, InteractionCheckError

logger = logging.getLogger(__name__)


EXTRACTION_PROMPT = """
Carefully extract the medicine details from this prescription.

Return ONLY a JSON object of the form {"medicines": [...]} where each item has:
- name (string): name of the medicine
- dosage (string): dosage amount, e.g. "500mg" or "1 tablet"
- frequency (string): how often to take it, e.g. "Twice daily"
- timings (list of strings): standard slots, chosen from Morning, Afternoon, Evening, Night
- durationDays (number): duration in days

Do NOT invent medicines that are not on the prescription.
"""

INTERACTION_PROMPT = """
Act as a clinical pharmacist. Analyze potential interactions between the prescribed
medicines and the listed OTC remedies/natural supplements.

Return ONLY a JSON object where the keys are the medicine IDs and the values are objects with:
- "severity": either "high" (serious interaction) or "medium" (precautionary advice).
- "summary": a short (3-5 words) punchy warning title.
- "detail": a full explanation of the interaction and what to do.

If no interaction exists for a medicine, do not include its ID.
"""


def _get_azure_client() -> AzureOpenAI:
    return AzureOpenAI(
        api_version=settings.AZURE_API_VERSION,
        azure_endpoint=settings.AZURE_FOUNDRY_ENDPOINT,
        api_key=settings.AZURE_FOUNDRY_API_KEY,
    )


class CareAI:
    """Prescription extraction and interaction checks on the chat model."""

    def __init__(self, client: Optional[Any] = None, deployment: Optional[str] = None):
        self._client = client
        self.deployment = deployment or settings.AZURE_CHAT_DEPLOYMENT

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = _get_azure_client()
        return self._client

    def _complete_json(self, messages: List[Dict[str, Any]]) -> str:
        completion = self.client.chat.completions.create(
            model=self.deployment,
            messages=messages,
            response_format={"type": "json_object"},
        )
        return completion.choices[0].message.content or ""

    def parse_prescription(self, image_bytes: bytes, mime_type: str = "image/jpeg") -> List[Medicine]:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        messages = [
            {"role": "system", "content": EXTRACTION_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Extract the medicines from this prescription image."},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                ],
            },
        ]

        try:
            json_text = self._complete_json(messages)
        except OpenAIError as e:
            raise ExtractionError(f"Extraction request failed: {e}") from e
        if not json_text.strip():
            raise ExtractionError("No data extracted from prescription.")

        try:
            payload = json.loads(json_text)
            records = payload.get("medicines", []) if isinstance(payload, dict) else payload
            extracted = [ExtractedMedicine.model_validate(r) for r in records]

            stamp = int(time.time() * 1000)
            return [
                Medicine(
                    id=f"med-{stamp}-{index}",
                    name=m.name,
                    dosage=m.dosage,
                    frequency=m.frequency,
                    timings=m.timings,
                    durationDays=m.durationDays or settings.DEFAULT_DURATION_DAYS,
                )
                for index, m in enumerate(extracted)
            ]
        except (ValueError, TypeError, AttributeError, ValidationError) as e:
            raise ExtractionError(f"Unreadable extraction result: {e}") from e

    def check_interactions(
        self, medicines: Sequence[Medicine], remedies: Sequence[str]
    ) -> Dict[str, Interaction]:
        if not medicines or not remedies:
            return {}

        med_lines = "\n".join(f"- {m.id}: {m.name} ({m.dosage})" for m in medicines)
        remedy_lines = "\n".join(f"- {r}" for r in remedies)
        payload = (
            f"Prescribed Medicines (ID: name (dosage)):\n{med_lines}\n\n"
            f"OTC/Remedies:\n{remedy_lines}"
        )

        try:
            json_text = self._complete_json(
                [
                    {"role": "system", "content": INTERACTION_PROMPT},
                    {"role": "user", "content": payload},
                ]
            )
        except OpenAIError as e:
            raise InteractionCheckError(f"Interaction request failed: {e}") from e
        if not json_text.strip():
            return {}

        try:
            raw = json.loads(json_text)
            known = {m.id for m in medicines}
            return {
                med_id: Interaction.model_validate(value)
                for med_id, value in raw.items()
                if med_id in known
            }
        except (ValueError, AttributeError, ValidationError) as e:
            raise InteractionCheckError(f"Unreadable interaction result: {e}") from e
