"""
Core Schema Definitions for the Medical Chat Assistant

The session log holds two kinds of turns: the user's queries and the
reports synthesized from successful responses. Failed attempts never
produce a report; they only leave the session in the error phase.

Pipeline:
  (1) User query → UserTurn (log) → phase PENDING
  (2) Policy prompt + query → GenerateContentRequest → Gemini
  (3) GenerateContentResponse → validated text → Report → ReportTurn (log) → phase IDLE
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .schema_config import BlockThreshold, HarmCategory, PhaseKind


# ============================================================================
# REPORT & TURNS (session log)
# ============================================================================

class Report(BaseModel):
    """
    Structured result of one successful query/response cycle.
    Immutable once created; owned by the session log after it is appended.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Opaque short identifier, unique within a session")
    query: str = Field(..., min_length=1, description="The exact user text that produced this report")
    response: str = Field(..., min_length=1, description="Normalized assistant text (trimmed)")
    created_at: datetime = Field(..., description="Captured when the response was received")

    @field_validator("response")
    @classmethod
    def _response_is_trimmed(cls, value: str) -> str:
        if value != value.strip():
            raise ValueError("response must not have leading or trailing whitespace")
        return value


class UserTurn(BaseModel):
    """A user query as it was submitted."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    text: str = Field(..., min_length=1)


class ReportTurn(BaseModel):
    """An assistant report paired with the query before it."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["report"] = "report"
    report: Report


Turn = Annotated[Union[UserTurn, ReportTurn], Field(discriminator="kind")]


# ============================================================================
# SESSION PHASE
# ============================================================================

class SessionPhase(BaseModel):
    """Current lifecycle phase. Exactly one is active at a time."""
    model_config = ConfigDict(frozen=True)

    kind: PhaseKind = PhaseKind.IDLE
    message: Optional[str] = Field(None, description="Human-readable error (ERROR only)")
    turn_index: Optional[int] = Field(
        None,
        description="Index of the user turn left without a report (ERROR only)"
    )

    @classmethod
    def idle(cls) -> "SessionPhase":
        return cls(kind=PhaseKind.IDLE)

    @classmethod
    def pending(cls) -> "SessionPhase":
        return cls(kind=PhaseKind.PENDING)

    @classmethod
    def error(cls, message: str, turn_index: Optional[int] = None) -> "SessionPhase":
        return cls(kind=PhaseKind.ERROR, message=message, turn_index=turn_index)

    @property
    def is_idle(self) -> bool:
        return self.kind == PhaseKind.IDLE

    @property
    def is_pending(self) -> bool:
        return self.kind == PhaseKind.PENDING

    @property
    def is_error(self) -> bool:
        return self.kind == PhaseKind.ERROR


class SessionSnapshot(BaseModel):
    """Read-only view of the session for rendering."""
    model_config = ConfigDict(frozen=True)

    turns: Tuple[Turn, ...] = ()
    phase: SessionPhase = Field(default_factory=SessionPhase.idle)

    @property
    def reports(self) -> List[Report]:
        return [t.report for t in self.turns if isinstance(t, ReportTurn)]


# ============================================================================
# OUTBOUND REQUEST (generateContent body)
# ============================================================================

class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RequestPart(_CamelModel):
    text: str


class RequestContent(_CamelModel):
    parts: List[RequestPart]


class GenerationConfig(_CamelModel):
    """Sampling parameters sent with every request."""
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    top_k: int = Field(40, alias="topK", gt=0)
    top_p: float = Field(0.95, alias="topP", gt=0.0, le=1.0)
    max_output_tokens: int = Field(150, alias="maxOutputTokens", gt=0)


class SafetySetting(_CamelModel):
    category: HarmCategory
    threshold: BlockThreshold


class GenerateContentRequest(_CamelModel):
    """
    Request body for the generateContent call.
    The prompt is a single user content whose only part is
    "<policy prefix>\\n\\nUser: <query>\\n\\nAssistant:".
    """
    contents: List[RequestContent]
    generation_config: GenerationConfig = Field(..., alias="generationConfig")
    safety_settings: List[SafetySetting] = Field(..., alias="safetySettings")

    @property
    def prompt_text(self) -> str:
        return "\n".join(part.text for content in self.contents for part in content.parts)

    def to_payload(self) -> dict:
        """JSON-ready dict with the API's camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# INBOUND RESPONSE (generateContent result)
# ============================================================================

class _LenientModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResponsePart(_LenientModel):
    text: Optional[str] = None


class ResponseContent(_LenientModel):
    parts: List[ResponsePart] = Field(default_factory=list)


class Candidate(_LenientModel):
    content: Optional[ResponseContent] = None
    finish_reason: Optional[str] = Field(None, alias="finishReason")


class PromptFeedback(_LenientModel):
    block_reason: Optional[str] = Field(None, alias="blockReason")


class GenerateContentResponse(_LenientModel):
    """Only the fields the engine reads; everything else is ignored."""
    candidates: List[Candidate] = Field(default_factory=list)
    prompt_feedback: Optional[PromptFeedback] = Field(None, alias="promptFeedback")
