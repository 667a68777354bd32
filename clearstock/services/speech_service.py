"""
Proxy para a API de Speech-to-Text da ElevenLabs.

Recebe o áudio gravado no browser e devolve apenas o texto transcrito.
"""

import logging
from typing import Any

import httpx
from fastapi import Depends

from clearstock.config import Settings, get_settings

logger = logging.getLogger(__name__)


class SpeechToTextError(Exception):
    """Falha na transcrição; status_code é devolvido tal como ao cliente."""

    def __init__(self, message: str, status_code: int = 500, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def extract_transcription(data: Any) -> str:
    """
    A resposta pode vir como {text}, {transcription}, {result: {text}} ou {data: {text}}.
    """
    if not isinstance(data, dict):
        return ""
    for candidate in (
        data.get("text"),
        data.get("transcription"),
        (data.get("result") or {}).get("text") if isinstance(data.get("result"), dict) else None,
        (data.get("data") or {}).get("text") if isinstance(data.get("data"), dict) else None,
    ):
        if isinstance(candidate, str) and candidate.strip():
            return candidate
    return ""


class SpeechToTextClient:
    def __init__(
        self,
        api_key: str | None,
        *,
        url: str,
        model_id: str = "scribe_v1",
        language_code: str = "pt-PT",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model_id = model_id
        self.language_code = language_code
        self.timeout = timeout
        self.transport = transport

    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        if not self.api_key:
            logger.error("[STT] ELEVENLABS_API_KEY não configurada")
            raise SpeechToTextError("API key not configured", status_code=500)

        files = {"file": (filename or "audio.webm", audio, content_type or "audio/webm")}
        data = {"model_id": self.model_id, "language_code": self.language_code}
        headers = {"xi-api-key": self.api_key}

        logger.info(f"[STT] A enviar áudio para transcrição ({len(audio)} bytes, tipo={content_type})")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, headers=headers, data=data, files=files)
        except httpx.RequestError as e:
            logger.error(f"[STT] Pedido HTTP falhou: {e}")
            raise SpeechToTextError("Failed to transcribe audio", status_code=502, details=str(e))

        if response.status_code >= 400:
            details = response.text or f"HTTP {response.status_code}"
            logger.error(f"[STT] Erro da API ({response.status_code}): {details}")
            raise SpeechToTextError(
                "Failed to transcribe audio", status_code=response.status_code, details=details
            )

        try:
            payload = response.json()
        except ValueError:
            logger.error(f"[STT] Resposta não é JSON: {response.text[:200]}")
            raise SpeechToTextError("Invalid response from API", status_code=500, details=response.text)

        text = extract_transcription(payload)
        if not text:
            logger.warning(f"[STT] Resposta sem transcrição: {payload}")
            raise SpeechToTextError(
                "No transcription received from API",
                status_code=500,
                details="API returned success but no transcription text.",
            )
        return text


def get_speech_client(settings: Settings = Depends(get_settings)) -> SpeechToTextClient:
    return SpeechToTextClient(
        settings.elevenlabs_api_key,
        url=settings.elevenlabs_url,
        model_id=settings.elevenlabs_model_id,
        language_code=settings.elevenlabs_language_code,
        timeout=settings.elevenlabs_timeout,
    )
