from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import google.generativeai as genai

from .config import Settings
from .errors import NetworkError, UpstreamError

logger = logging.getLogger("style_assistant.gemini")


class GeminiClient:
    """Thin wrapper around Gemini SDK returning the raw generateContent payload."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Keep model settings; the SDK is configured on first use.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: None until generate() is called.
        Dependencies: Uses google.generativeai and Settings from config.
        Failure Modes: None at init, so the app can start without an API key and
            serve /api/products; chat then fails with UpstreamError.
        If Removed: Chat requests cannot reach the generation API.
        Testing Notes: Validate a missing key raises UpstreamError on generate().
        """
        self._settings = settings
        self._model_name = _normalize_model_name(settings.gemini_model)
        self._model: Optional[genai.GenerativeModel] = None

    def _get_model(self) -> genai.GenerativeModel:
        # Configure the SDK once, on the first request.
        if self._model is not None:
            return self._model
        if not self._settings.gemini_api_key:
            raise UpstreamError("GEMINI_API_KEY is not configured")
        if not self._model_name:
            raise UpstreamError("Gemini model name is required")
        genai.configure(api_key=self._settings.gemini_api_key)
        self._model = genai.GenerativeModel(self._model_name)
        return self._model

    def generate(self, prompt: str) -> Dict[str, Any]:
        """Purpose: Send a single prompt and return the response payload.
        Inputs/Outputs: Input is the full prompt string; output is a dict shaped
            like {"candidates": [{"content": {"parts": [{"text": ...}]}}]}.
        Side Effects / State: One network call to the Gemini API; no retry.
        Dependencies: Uses genai.GenerativeModel.generate_content.
        Failure Modes: SDK or transport exceptions are raised as NetworkError.
        If Removed: The relay has no upstream to talk to.
        Testing Notes: Stub the SDK model and check the payload is passed through.
        """
        model = self._get_model()
        try:
            response = model.generate_content(
                prompt,
                generation_config={
                    "temperature": self._settings.gemini_temperature,
                    "max_output_tokens": self._settings.gemini_max_output_tokens,
                },
            )
            payload = response.to_dict()
        except Exception as exc:
            raise NetworkError(f"Gemini request failed: {exc}") from exc
        logger.debug("gemini model=%s candidates=%d", self._model_name, len(payload.get("candidates") or []))
        return payload


def _normalize_model_name(name: Optional[str]) -> str:
    """Strip whitespace and an optional "models/" prefix from a model name."""
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned
