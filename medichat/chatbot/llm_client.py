"""
LLM Client Wrapper (Gemini + LangChain)

The remote capability used by the orchestrator. It takes a
GenerateContentRequest, calls Google Gemini once through LangChain's
ChatGoogleGenerativeAI, and hands back the reply in the generateContent
response shape:

    {"candidates": [{"content": {"parts": [{"text": "..."}]}, "finishReason": "..."}]}

Validation of that shape is the caller's job (see report_builder).
"""

from typing import Any, Dict, List, Optional

from langchain_core.messages import AIMessage
from langchain_google_genai import ChatGoogleGenerativeAI, HarmBlockThreshold, HarmCategory

from ..config import MISSING_API_KEY_MESSAGE, default_model, load_api_key
from ..errors import PreconditionError, ResponseError
from ..schema.core_schema import GenerateContentRequest, GenerationConfig, SafetySetting


class LLMClient:
    """Gemini-only remote capability."""

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None) -> None:
        """
        Initialize the Gemini client.

        A missing credential does not raise here; `is_configured` reports it
        and the orchestrator turns it into a PreconditionError before any call.

        Args:
            model: Gemini model name (default: MEDICHAT_MODEL or "gemini-2.0-flash").
            api_key: Explicit credential. Falls back to GOOGLE_API_KEY / GEMINI_API_KEY.
        """
        self.model = model or default_model()
        self.api_key = api_key if api_key is not None else load_api_key()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    # ------------------------------------------------------------------
    # Remote call
    # ------------------------------------------------------------------
    def generate_content(self, request: GenerateContentRequest) -> Dict[str, Any]:
        """Send `request` exactly once and return the response payload."""
        if not self.is_configured:
            raise PreconditionError(MISSING_API_KEY_MESSAGE)

        llm = self._build_llm(request.generation_config, request.safety_settings)
        try:
            resp = llm.invoke(request.prompt_text)
        except Exception as e:
            raise ResponseError(f"Gemini request failed: {e}") from e

        return self._to_response_payload(resp)

    def _build_llm(
        self,
        generation_config: GenerationConfig,
        safety_settings: List[SafetySetting],
    ) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=self.model,
            google_api_key=self.api_key,
            temperature=generation_config.temperature,
            top_k=generation_config.top_k,
            top_p=generation_config.top_p,
            max_output_tokens=generation_config.max_output_tokens,
            safety_settings={
                getattr(HarmCategory, s.category.value): getattr(HarmBlockThreshold, s.threshold.value)
                for s in safety_settings
            },
            max_retries=1,  # a single attempt
        )

    # ------------------------------------------------------------------
    # Response normalization
    # ------------------------------------------------------------------
    @staticmethod
    def _to_response_payload(resp: Any) -> Dict[str, Any]:
        """Map a LangChain AIMessage onto the generateContent response shape."""
        metadata: Dict[str, Any] = dict(getattr(resp, "response_metadata", None) or {})
        content = resp.content if isinstance(resp, AIMessage) else getattr(resp, "content", resp)

        parts: List[Dict[str, Any]] = []
        if isinstance(content, str):
            if content:
                parts.append({"text": content})
        elif isinstance(content, list):
            for item in content:
                if isinstance(item, str):
                    parts.append({"text": item})
                elif isinstance(item, dict) and item.get("text"):
                    parts.append({"text": item["text"]})

        payload: Dict[str, Any] = {"candidates": []}
        if parts:
            payload["candidates"].append(
                {
                    "content": {"parts": parts},
                    "finishReason": metadata.get("finish_reason"),
                }
            )
        feedback = metadata.get("prompt_feedback")
        if isinstance(feedback, dict) and feedback.get("block_reason"):
            payload["promptFeedback"] = {"blockReason": str(feedback["block_reason"])}
        return payload
