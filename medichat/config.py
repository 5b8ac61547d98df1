"""
Runtime configuration: credential lookup, model name, and the fixed
policy / generation / safety constants sent with every request.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

from .schema.core_schema import GenerationConfig, SafetySetting
from .schema.schema_config import BlockThreshold, HarmCategory

load_dotenv()

API_KEY_ENV_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY")
MODEL_ENV_VAR = "MEDICHAT_MODEL"
DEFAULT_MODEL = "gemini-2.0-flash"

MEDICAL_POLICY_PROMPT = """You are a helpful healthcare assistant. Provide brief, clear responses that are:
1. Concise and to the point (2-3 sentences max per topic)
2. Easy to understand
3. Focused on practical advice
4. Include only essential medical information
5. Add a very brief disclaimer only when necessary

Keep total response length under 100 words."""

DEFAULT_GENERATION_CONFIG = GenerationConfig(
    temperature=0.7,
    top_k=40,
    top_p=0.95,
    max_output_tokens=150,
)

DEFAULT_SAFETY_SETTINGS: List[SafetySetting] = [
    SafetySetting(category=category, threshold=BlockThreshold.BLOCK_MEDIUM_AND_ABOVE)
    for category in (
        HarmCategory.HARASSMENT,
        HarmCategory.HATE_SPEECH,
        HarmCategory.SEXUALLY_EXPLICIT,
        HarmCategory.DANGEROUS_CONTENT,
    )
]

REPORT_ID_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
REPORT_ID_LENGTH = 9  # 36^9 ~ 2^46

REPORT_TITLE = "Medical Consultation Report"
REPORT_DISCLAIMER = (
    "Disclaimer: This is an AI-generated response for informational purposes only. "
    "Please consult with a qualified healthcare professional for medical advice."
)

# User-visible error messages
EMPTY_QUERY_MESSAGE = "Please enter a question."
MISSING_API_KEY_MESSAGE = "API key is not configured"
REQUEST_FAILED_MESSAGE = "Failed to process your request"


def load_api_key() -> Optional[str]:
    """Return the Gemini credential from the environment, or None if unset."""
    for name in API_KEY_ENV_VARS:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def default_model() -> str:
    return os.getenv(MODEL_ENV_VAR) or DEFAULT_MODEL
