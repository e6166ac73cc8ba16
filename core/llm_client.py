# core/llm_client.py
from __future__ import annotations
import logging
import os
from typing import Any, Dict, Optional

from openai import BadRequestError, OpenAI

from .models import Schema

logger = logging.getLogger(__name__)

OLLAMA_BASE_URL = "http://localhost:11434/v1"

DEFAULT_MODELS = {
    "ollama": "llama3",
    "openai": "gpt-4o-mini",
}


def llm_meta() -> Dict[str, Any]:
    provider = os.getenv("LLM_PROVIDER", "ollama")
    return {
        "provider": provider,
        "model": os.getenv("LLM_MODEL") or DEFAULT_MODELS.get(provider, ""),
        "base_url": os.getenv("LLM_BASE_URL") or (OLLAMA_BASE_URL if provider == "ollama" else None),
        "available": provider == "ollama" or bool(os.getenv("LLM_API_KEY")),
    }


# =============================================================================
class LLMClient:
    """Backend de modelo via SDK openai (OpenAI ou servidor compatível, ex.: Ollama)."""

    def __init__(self, model: str | None = None, provider: str | None = None, base_url: str | None = None):
        self.provider = provider or os.getenv("LLM_PROVIDER", "ollama")
        self.model = model or os.getenv("LLM_MODEL") or DEFAULT_MODELS.get(self.provider, "")
        self.api_key = os.getenv("LLM_API_KEY", "")
        self.timeout = float(os.getenv("LLM_TIMEOUT", "300"))
        self.base_url = base_url or os.getenv("LLM_BASE_URL") or None

        if self.provider == "ollama":
            # o endpoint compatível do Ollama ignora a chave, mas o SDK exige uma
            self._client = OpenAI(
                base_url=self.base_url or OLLAMA_BASE_URL,
                api_key=self.api_key or "ollama",
                timeout=self.timeout,
            )
        elif self.provider == "openai":
            if not self.api_key:
                raise RuntimeError("LLM_API_KEY is missing. Configure it via .env")
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        else:
            raise NotImplementedError(f"Unsupported LLM provider: {self.provider}")

    def _messages(self, prompt: str) -> list[dict]:
        return [{"role": "user", "content": prompt}]

    def _response_format(self, schema: Schema) -> Dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {"name": "extraction", "schema": schema.as_json()},
        }

    def _call_chat_completions(self, prompt: str, response_format: Optional[Dict[str, Any]]) -> str:
        kwargs: Dict[str, Any] = {"model": self.model, "messages": self._messages(prompt)}
        if response_format is not None:
            kwargs["response_format"] = response_format
        resp = self._client.chat.completions.create(**kwargs)
        # resposta vazia = objeto vazio; os defaults são preenchidos depois
        return resp.choices[0].message.content or "{}"

    def complete(self, prompt: str, schema: Schema) -> str:
        """Texto de resposta que *deveria* ser JSON no formato de ``schema``."""
        try:
            return self._call_chat_completions(prompt, self._response_format(schema))
        except BadRequestError as e:
            # backend sem suporte a saída estruturada: repete sem o formato
            logger.warning("response_format recusado por %s (%s); repetindo sem formato", self.model, e)
            return self._call_chat_completions(prompt, None)
