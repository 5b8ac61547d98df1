"""
Report synthesis.

Validates a raw generateContent response, extracts the assistant text from
candidates[0].content.parts[0].text and turns it into an immutable Report.
Anything short of that structure is a ResponseError; partial structure is
never used.
"""

import secrets
from datetime import datetime
from typing import Any, Callable, Container, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import REPORT_ID_ALPHABET, REPORT_ID_LENGTH
from ..errors import ResponseError
from ..schema.core_schema import GenerateContentResponse, Report


def extract_reply_text(response: Any) -> str:
    """
    Return the trimmed text of the first candidate's first part.

    Raises:
        ResponseError: if the response is not a mapping, has no candidates,
            the first candidate has no content/parts/text, or the text is blank.
    """
    if isinstance(response, GenerateContentResponse):
        parsed = response
    elif isinstance(response, Mapping):
        try:
            parsed = GenerateContentResponse.model_validate(dict(response))
        except PydanticValidationError as e:
            raise ResponseError(f"Malformed response: {e.error_count()} validation error(s)") from e
    else:
        raise ResponseError(f"Unexpected response type: {type(response).__name__}")

    if not parsed.candidates:
        reason = parsed.prompt_feedback.block_reason if parsed.prompt_feedback else None
        if reason:
            raise ResponseError(f"Response has no candidates (blocked: {reason})")
        raise ResponseError("Response has no candidates")

    first = parsed.candidates[0]
    if first.content is None or not first.content.parts:
        raise ResponseError("First candidate has no content parts")

    text = first.content.parts[0].text
    if not text:
        raise ResponseError("First candidate part has no text")

    text = text.strip()
    if not text:
        raise ResponseError("Response text is blank")
    return text


def mint_report_id(
    existing: Container[str] = (),
    length: int = REPORT_ID_LENGTH,
    alphabet: str = REPORT_ID_ALPHABET,
) -> str:
    """Random uppercase alphanumeric token not present in `existing`."""
    while True:
        token = "".join(secrets.choice(alphabet) for _ in range(length))
        if token not in existing:
            return token


def synthesize_report(
    query: str,
    response: Any,
    existing_ids: Container[str] = (),
    clock: Optional[Callable[[], datetime]] = None,
) -> Report:
    """Validate `response` and build the Report for `query`."""
    text = extract_reply_text(response)
    created_at = clock() if clock else datetime.now().astimezone()
    return Report(
        id=mint_report_id(existing_ids),
        query=query,
        response=text,
        created_at=created_at,
    )
