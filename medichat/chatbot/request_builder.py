"""
Request builder

Input: the user's raw query.
Output: GenerateContentRequest
  - contents: one part, "<policy prefix>\\n\\nUser: <query>\\n\\nAssistant:"
  - generationConfig: fixed sampling parameters (bounded output length)
  - safetySettings: four harm categories, each BLOCK_MEDIUM_AND_ABOVE

Single-turn only: no earlier turns are ever included in the prompt.
"""

from typing import Optional, Sequence

from ..config import DEFAULT_GENERATION_CONFIG, DEFAULT_SAFETY_SETTINGS, MEDICAL_POLICY_PROMPT
from ..schema.core_schema import (
    GenerateContentRequest,
    GenerationConfig,
    RequestContent,
    RequestPart,
    SafetySetting,
)


def build_prompt_text(query: str, policy_prompt: str = MEDICAL_POLICY_PROMPT) -> str:
    return f"{policy_prompt}\n\nUser: {query}\n\nAssistant:"


def build_request(
    query: str,
    policy_prompt: str = MEDICAL_POLICY_PROMPT,
    generation_config: Optional[GenerationConfig] = None,
    safety_settings: Optional[Sequence[SafetySetting]] = None,
) -> GenerateContentRequest:
    """Compose the outbound request for a single query."""
    return GenerateContentRequest(
        contents=[RequestContent(parts=[RequestPart(text=build_prompt_text(query, policy_prompt))])],
        generation_config=generation_config or DEFAULT_GENERATION_CONFIG,
        safety_settings=list(safety_settings if safety_settings is not None else DEFAULT_SAFETY_SETTINGS),
    )
