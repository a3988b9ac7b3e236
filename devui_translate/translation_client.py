# -*- coding: utf-8 -*-
"""devui-translate – OpenAI-compatible translation client (with structured logging)

Translates one English UI string at a time through a chat-completions endpoint.

Design principles
- Scoped sessions: ``OpenAITranslator.session()`` is a context manager that owns
  one ``requests.Session`` and always closes it, success or failure
- No hidden retries: a failed call raises; callers decide what to do with it
- Robust error handling (HTTP errors + 200-with-no-choice pattern)
- API keys never reach the logs unmasked

Configuration
- api_key (string, required; usually OPENAI_API_KEY)
- base_url (string; default https://api.openai.com/v1)
- model (string; default gpt-4o-mini)

Usage
-----
from devui_translate.translation_client import OpenAITranslator, TranslationError
translator = OpenAITranslator(api_key="sk-...")
with translator.session() as session:
    session.translate("French (Canada)", "Hello {0}")
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ContextManager, Dict, Iterator, Optional, Protocol

import requests

from devui_translate.utils.logging import (
    compact_json as _compact,
    log_http_request,
    log_http_response,
    mask_token as _mask_token,
    translate_logger,
)

LOG = translate_logger.getChild("translation_client")

__all__ = [
    "Translator",
    "TranslationSession",
    "OpenAITranslator",
    "OpenAITranslationSession",
    "TranslationError",
    "TranslationConfigError",
    "TranslationRequestError",
    "TranslationContractError",
    "SYSTEM_PROMPT",
]

SYSTEM_PROMPT = (
    "You translate English UI strings, used in Quarkus Dev UI pages, to {language}.\n"
    "Maintain placeholder variables like {{0}} and keep punctuation intact.\n"
    "Return only the translated text."
)


# -------------------------
# Exceptions
# -------------------------
class TranslationError(Exception):
    """Base exception for the translation client."""


class TranslationConfigError(TranslationError):
    """Raised when configuration is missing or invalid."""


class TranslationRequestError(TranslationError):
    """Raised on HTTP-level or transport-level failures."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload or {}


class TranslationContractError(TranslationError):
    """Raised when a 200 response carries no usable translation."""

    def __init__(self, message: str, status: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload or {}


# -------------------------
# Interfaces
# -------------------------
class TranslationSession(Protocol):
    def translate(self, language_label: str, text: str) -> str:
        ...


class Translator(Protocol):
    def session(self) -> ContextManager[TranslationSession]:
        ...


# -------------------------
# Client
# -------------------------
@dataclass
class OpenAITranslator:
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    timeout_seconds: int = 60
    temperature: float = 0.0
    user_agent: str = "devui-translate/1.0"

    def __post_init__(self) -> None:
        self.base_url = str(self.base_url).rstrip("/")
        LOG.debug(
            f"OpenAITranslator.init: base_url={self.base_url!r} model={self.model!r} "
            f"api_key={_mask_token(self.api_key)} timeout={self.timeout_seconds}s"
        )

    @contextmanager
    def session(self) -> Iterator["OpenAITranslationSession"]:
        """Open one HTTP session for a batch of translations; always closed on exit."""
        if not self.api_key:
            LOG.error("session: OpenAI API key is not configured")
            raise TranslationConfigError("OpenAI API key is not configured. Set --openai-api-key or OPENAI_API_KEY.")
        http = requests.Session()
        http.headers.update(self._headers())
        LOG.debug("session: opened")
        try:
            yield OpenAITranslationSession(self, http)
        finally:
            http.close()
            LOG.debug("session: closed")

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": self.user_agent,
        }

    def build_payload(self, language_label: str, text: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(language=language_label)},
                {"role": "user", "content": text},
            ],
        }


class OpenAITranslationSession:
    """A live session bound to one ``requests.Session``; created by ``OpenAITranslator.session()``."""

    def __init__(self, client: OpenAITranslator, http: requests.Session) -> None:
        self.client = client
        self.http = http

    def translate(self, language_label: str, text: str) -> str:
        url = f"{self.client.base_url}/chat/completions"
        payload = self.client.build_payload(language_label, text)
        log_http_request(LOG, method="POST", url=url, payload=payload, headers=dict(self.http.headers))
        try:
            resp = self.http.post(url, json=payload, timeout=self.client.timeout_seconds)
        except (requests.Timeout, requests.ConnectionError) as e:
            LOG.warning(f"network error on POST {url}: {e}")
            raise TranslationRequestError(f"Network error: {e}") from e
        return self._handle_response(resp)

    def _handle_response(self, resp: requests.Response) -> str:
        status = resp.status_code
        text = resp.text or ""

        if status >= 400:
            try:
                payload = resp.json()
            except ValueError:
                payload = {"raw": text}
            message = self._extract_http_error_message(payload) or f"HTTP {status}"
            log_http_response(LOG, url=resp.url, status=status, body=payload)
            raise TranslationRequestError(message, status=status, payload=payload if isinstance(payload, dict) else {})

        try:
            body = resp.json()
        except ValueError as e:
            LOG.error(f"invalid_json: {e}; raw={_compact(text)}")
            raise TranslationContractError(f"Invalid JSON response: {e}", status=status, payload={"raw": text})

        log_http_response(LOG, url=resp.url, status=status, body=body)
        content = self._extract_content(body)
        if content is None:
            LOG.error(f"contract_error: no choices in body={_compact(body)}")
            raise TranslationContractError("Response carried no translation", status=status, payload=body)
        return content.strip()

    @staticmethod
    def _extract_content(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        choices = body.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) and content.strip() else None

    @staticmethod
    def _extract_http_error_message(payload: Any) -> Optional[str]:
        # Typical OpenAI error: {"error": {"message": "...", "type": "...", "code": "..."}}
        if not isinstance(payload, dict):
            return None
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if payload.get("message"):
            return str(payload["message"])
        return None
