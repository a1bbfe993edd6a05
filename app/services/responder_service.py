# file: app/services/responder_service.py

import logging

import requests

from app.core.exceptions import ResponderError
from app.core.settings import settings
from app.schemas.responder import AIResponse
from app.utils.prompt_builder import build_history_messages, build_sales_system_prompt

logger = logging.getLogger("responder_service")

NO_CONTENT_REPLY = "No se pudo generar una respuesta."


class ClaudeResponder:
    """
    Stateless client for the Claude Messages API.
    Every failure surfaces as ResponderError.
    """

    def __init__(self, session: requests.Session | None = None):
        self.api_url = settings.CLAUDE_API_URL
        self.api_key = settings.CLAUDE_API_KEY
        self.api_version = settings.CLAUDE_API_VERSION
        self.model = settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS
        self.timeout = settings.CLAUDE_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def generate(self, user_message: str, history: list[str] | None = None) -> AIResponse:
        logger.info(f"[AI] Generating reply (history={len(history or [])} turns)")

        messages = build_history_messages(history)
        messages.append({"role": "user", "content": user_message})

        return self._call(messages)

    def generate_with_products(self, user_message: str, products_context: str) -> AIResponse:
        logger.info("[AI] Generating reply with catalog context")

        return self._call(
            [{"role": "user", "content": user_message}],
            system_prompt=build_sales_system_prompt(products_context),
        )

    # --------------------------------------------------------
    # HTTP
    # --------------------------------------------------------
    def _call(self, messages: list[dict], system_prompt: str | None = None) -> AIResponse:
        if not self.api_key:
            raise ResponderError("CLAUDE_API_KEY is not configured")

        body = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system_prompt:
            body["system"] = system_prompt

        try:
            r = self.session.post(
                self.api_url,
                json=body,
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": self.api_version,
                    "content-type": "application/json",
                },
                timeout=self.timeout,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            logger.exception("[AI] Error calling Claude API")
            raise ResponderError(f"Error calling Claude API: {e}") from e

        try:
            data = r.json()
        except ValueError as e:
            raise ResponderError("Claude API returned a non-JSON body") from e

        if not data or not isinstance(data, dict):
            raise ResponderError("Empty response from Claude API")

        usage = data.get("usage") or {}
        response = AIResponse(
            content=self._extract_text(data),
            model=data.get("model"),
            tokens_used=usage.get("output_tokens"),
            finish_reason=data.get("stop_reason"),
        )

        logger.info(
            f"[AI] Reply generated model={response.model} "
            f"tokens={response.tokens_used} stop={response.finish_reason}"
        )
        return response

    @staticmethod
    def _extract_text(data: dict) -> str:
        for block in data.get("content") or []:
            if isinstance(block, dict) and block.get("text"):
                return block["text"]

        logger.warning(f"[AI] Response without text content: {data}")
        return NO_CONTENT_REPLY


_responder: ClaudeResponder | None = None


def get_responder() -> ClaudeResponder:
    global _responder
    if _responder is None:
        _responder = ClaudeResponder()
    return _responder
