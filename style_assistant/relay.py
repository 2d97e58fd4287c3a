from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, ValidationError

from .errors import MalformedResponse
from .prompt_builder import build_prompt
from .utils import sanitize_reply

logger = logging.getLogger("style_assistant.relay")


class GenerationPart(BaseModel):
    text: Optional[str] = None


class GenerationContent(BaseModel):
    parts: List[GenerationPart] = []


class GenerationCandidate(BaseModel):
    content: Optional[GenerationContent] = None


class GenerationPayload(BaseModel):
    """The subset of a generateContent response the relay depends on."""
    candidates: List[GenerationCandidate] = []


def extract_reply_text(payload: Any) -> str:
    """Purpose: Validate a generation payload and pull out the first reply text.
    Inputs/Outputs: Input is the decoded response; output is the raw reply string.
    Side Effects / State: None; pure function.
    Dependencies: Uses the GenerationPayload pydantic models.
    Failure Modes: Raises MalformedResponse when the payload is not an object, has
        no candidate, no content part, or an empty text.
    If Removed: Odd upstream shapes would crash the chat route with KeyError.
    Testing Notes: Feed {"candidates": []} and a part without text.
    """
    if not isinstance(payload, dict):
        raise MalformedResponse("generation payload is not an object")
    try:
        parsed = GenerationPayload(**payload)
    except ValidationError as exc:
        raise MalformedResponse(f"generation payload failed validation: {exc}") from exc
    if not parsed.candidates:
        raise MalformedResponse("generation payload has no candidates")
    content = parsed.candidates[0].content
    if content is None or not content.parts:
        raise MalformedResponse("first candidate has no content parts")
    text = content.parts[0].text
    if not text or not text.strip():
        raise MalformedResponse("first content part has no text")
    return text


class ChatRelay:
    """Forward a customer message to the generation API and clean up the reply."""

    def __init__(self, generator: Any, persona_template: str) -> None:
        self._generator = generator
        self._template = persona_template

    def relay(self, message: str, inventory_block: str) -> str:
        """Purpose: Build the prompt, call the generator once, sanitize the reply.
        Inputs/Outputs: Inputs are the customer message and the rendered inventory
            block; output is the sanitized reply text (markers still included).
        Side Effects / State: One upstream call; no retry or backoff.
        Dependencies: Uses build_prompt, extract_reply_text and sanitize_reply.
        Failure Modes: NetworkError from the generator and MalformedResponse from
            validation or an empty sanitized reply propagate (both UpstreamError)
            to the route.
        If Removed: The chat route cannot produce a reply.
        Testing Notes: Use a fake generator returning a canned payload.
        """
        prompt = build_prompt(self._template, inventory_block, message)
        payload = self._generator.generate(prompt)
        reply = sanitize_reply(extract_reply_text(payload))
        if not reply:
            raise MalformedResponse("reply is empty after sanitization")
        logger.debug("relay reply_chars=%d", len(reply))
        return reply
