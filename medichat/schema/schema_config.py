"""
Schema Configuration
Enumerations shared by the session schema and the outbound request schema.
"""

from enum import Enum


class PhaseKind(str, Enum):
    """Lifecycle phase of a session"""
    IDLE = "idle"
    PENDING = "pending"  # exactly one request in flight
    ERROR = "error"


class HarmCategory(str, Enum):
    """Content-safety categories understood by the Gemini API"""
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


class BlockThreshold(str, Enum):
    """Blocking thresholds, from most to least permissive"""
    BLOCK_NONE = "BLOCK_NONE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
