"""
OpenAI service - HTTP calls to the chat completion and transcription endpoints
"""

import base64
import binascii
import logging
from datetime import datetime
from typing import List

import requests

from app.core.config import settings
from app.core.exceptions import AIConfigurationError, LLMRateLimitError, LLMUpstreamError

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Rate limit exceeded. Please wait a moment and try again. "
    "You may need to add credits to your OpenAI account: {}"
)


def _api_key() -> str:
    if not settings.OPENAI_API_KEY:
        raise AIConfigurationError()
    return settings.OPENAI_API_KEY


def _upstream_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = {}
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"OpenAI API error: {response.status_code}"


def _raise_for_upstream(response: requests.Response):
    if response.ok:
        return
    message = _upstream_message(response)
    if response.status_code == 429:
        raise LLMRateLimitError(RATE_LIMIT_MESSAGE.format(message))
    raise LLMUpstreamError(message)


def chat_completion(messages: List[dict], model: str = None) -> tuple[str, int, int]:
    """
    Send a chat completion request.

    Returns (content, tokens_used, elapsed_ms). Raises AIConfigurationError
    without an API key, LLMRateLimitError on HTTP 429 and LLMUpstreamError
    for any other failure.
    """
    api_key = _api_key()
    model = model or settings.OPENAI_MODEL
    start_time = datetime.utcnow()

    try:
        response = requests.post(
            f"{settings.OPENAI_BASE_URL}/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json"
            },
            json={
                "model": model,
                "messages": messages,
                "temperature": settings.OPENAI_TEMPERATURE,
                "max_tokens": settings.OPENAI_MAX_TOKENS
            },
            timeout=settings.LLM_TIMEOUT
        )
    except requests.RequestException as e:
        logger.error(f"OpenAI request failed: {e}")
        raise LLMUpstreamError(f"OpenAI request failed: {e}") from e

    _raise_for_upstream(response)

    try:
        data = response.json()
        content = data["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError):
        content = None

    if not content:
        raise LLMUpstreamError("No response from AI")

    usage = data.get("usage") or {}
    tokens = usage.get("total_tokens", 0)
    elapsed_ms = int((datetime.utcnow() - start_time).total_seconds() * 1000)

    return content, tokens, elapsed_ms


def check_connection() -> dict:
    """Check the credential against the models endpoint. Never raises."""
    if not settings.OPENAI_API_KEY:
        return {"connected": False, "error": "API key not configured"}

    try:
        response = requests.get(
            f"{settings.OPENAI_BASE_URL}/models",
            headers={"Authorization": f"Bearer {settings.OPENAI_API_KEY}"},
            timeout=10
        )
    except requests.RequestException as e:
        logger.warning(f"OpenAI not reachable: {e}")
        return {"connected": False, "error": str(e)}

    return {
        "connected": response.ok,
        "status": response.status_code,
        "error": None if response.ok else f"HTTP {response.status_code}"
    }


def transcribe_audio(audio_data: str) -> dict:
    """
    Transcribe base64 encoded audio (webm) to text.

    A missing API key raises; every other failure comes back as
    {"success": False, "error": ...}.
    """
    api_key = _api_key()

    try:
        audio_bytes = base64.b64decode(audio_data, validate=True)
    except (binascii.Error, ValueError):
        return {"success": False, "error": "Invalid audio data"}

    try:
        response = requests.post(
            f"{settings.OPENAI_BASE_URL}/audio/transcriptions",
            headers={"Authorization": f"Bearer {api_key}"},
            files={"file": ("recording.webm", audio_bytes, "audio/webm")},
            data={"model": settings.WHISPER_MODEL, "response_format": "json"},
            timeout=settings.LLM_TIMEOUT
        )

        if not response.ok:
            raise LLMUpstreamError(
                f"Whisper API error: {response.status_code} - {_upstream_message(response)}"
            )

        data = response.json()
        text = (data.get("text") if isinstance(data, dict) else None) or ""
        text = text.strip()

    except (requests.RequestException, ValueError, LLMUpstreamError) as e:
        logger.error(f"Whisper transcription error: {e}")
        return {"success": False, "error": str(e) or "Failed to transcribe audio"}

    if not text:
        return {"success": False, "error": "No speech detected in recording"}

    return {"success": True, "text": text}
