"""
Gemini text completion client.
Used only to pre-fill description and comment fields; its output is never
read back by the resolver or the aggregator.
"""
from typing import Any, Dict, Iterable, Optional

import httpx
import structlog

from ..config import settings
from ..errors import ServiceError, ValidationInputError
from ..models.domain import LOCATION_TAGS

logger = structlog.get_logger(__name__)


class TextCompletionClient:
    """Client for the Gemini generateContent endpoint"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.timeout = timeout or settings.text_completion_timeout_s
        self._transport = transport

    def _endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise ServiceError("Text completion is not configured", http_status=503)
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self._endpoint(), params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            logger.warning("text_completion_transport_failed", model=self.model, error=str(e))
            raise ServiceError(f"Text completion request failed: {e}")

        if response.status_code >= 400:
            logger.warning("text_completion_failed", model=self.model, status=response.status_code)
            raise ServiceError(
                f"Text completion failed with status {response.status_code}",
                http_status=response.status_code,
            )
        return _first_candidate_text(response.json())


def _first_candidate_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if candidates:
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if parts and parts[0].get("text"):
            return parts[0]["text"].strip()
    raise ServiceError("Text completion returned no candidates")


def draft_asset_description(client: TextCompletionClient, name: str, location_types: Iterable[str] = ()) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationInputError("SUDS name is required to draft a description")
    names_by_id = {t["id"]: t["name"] for t in LOCATION_TAGS}
    location_names = [names_by_id[t] for t in location_types if t in names_by_id]
    location_hint = f"Si los tipos de ubicación son: {', '.join(location_names)}. " if location_names else ""
    prompt = (
        f'Genera una descripción detallada para un SUDS llamado "{name}". {location_hint}'
        "Enfócate en su función, beneficios y características principales en el contexto de Madrid. "
        "La descripción debe ser concisa y profesional, de unas 3-5 frases."
    )
    return client.complete(prompt)


def draft_activity_analysis(client: TextCompletionClient, asset: dict, category: str, activity_name: str) -> str:
    if not (category or "").strip() or not (activity_name or "").strip():
        raise ValidationInputError("Category and activity name are required")
    prompt = (
        f'Analiza brevemente cómo se aplica la actividad de mantenimiento "{activity_name}" '
        f'(categoría "{category}") al SUDS "{asset.get("name")}". '
        f'Descripción del SUDS: {asset.get("description") or "sin descripción"}. '
        "Indica en 2-4 frases la frecuencia recomendada y los puntos de atención."
    )
    return client.complete(prompt)
