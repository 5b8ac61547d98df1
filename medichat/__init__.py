"""
Core modules for the Medical Chat Assistant.

This package exposes a clean public API while the actual implementation
is organized into subpackages:

- medichat.schema:     Pydantic schemas (Report, turns, phase, request/response)
- medichat.memory:     Session store (turn log + lifecycle phase)
- medichat.chatbot:    LLM client, request builder, report synthesis, orchestrator
- medichat.export:     PDF export of a single report
"""

# Errors
from .errors import (
    MedichatError,
    PreconditionError,
    ResponseError,
    ValidationError,
    InvalidTransitionError,
)

# Core schemas
from .schema.core_schema import (
    Report,
    UserTurn,
    ReportTurn,
    SessionPhase,
    SessionSnapshot,
    GenerateContentRequest,
)
from .schema.schema_config import PhaseKind

# Core classes
from .memory.session_store import SessionStore
from .chatbot.llm_client import LLMClient
from .chatbot.query_orchestrator import QueryOrchestrator
from .export.pdf_report import ReportArtifact, export_report

__all__ = [
    "MedichatError",
    "PreconditionError",
    "ResponseError",
    "ValidationError",
    "InvalidTransitionError",
    "Report",
    "UserTurn",
    "ReportTurn",
    "SessionPhase",
    "SessionSnapshot",
    "GenerateContentRequest",
    "PhaseKind",
    "SessionStore",
    "LLMClient",
    "QueryOrchestrator",
    "ReportArtifact",
    "export_report",
]
