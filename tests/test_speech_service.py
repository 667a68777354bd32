import asyncio

import httpx
import pytest

from clearstock.services.speech_service import SpeechToTextClient, SpeechToTextError, extract_transcription

URL = "https://stt.test/v1/speech-to-text"


def _client(handler, api_key="xi-test"):
    return SpeechToTextClient(api_key, url=URL, transport=httpx.MockTransport(handler))


def test_forwards_audio_with_key_and_language():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers.get("xi-api-key")
        seen["body"] = request.read()
        return httpx.Response(200, json={"text": "5 kg de leite"})

    text = asyncio.run(_client(handler).transcribe(b"RIFF", filename="a.webm", content_type="audio/webm"))

    assert text == "5 kg de leite"
    assert seen["key"] == "xi-test"
    assert b'name="language_code"' in seen["body"]
    assert b"pt-PT" in seen["body"]
    assert b'name="file"' in seen["body"]


def test_missing_api_key():
    client = _client(lambda request: httpx.Response(200, json={"text": "x"}), api_key=None)
    with pytest.raises(SpeechToTextError) as exc:
        asyncio.run(client.transcribe(b"x"))
    assert exc.value.status_code == 500
    assert exc.value.message == "API key not configured"


def test_upstream_error_status_is_passed_through():
    client = _client(lambda request: httpx.Response(401, json={"detail": "invalid key"}))
    with pytest.raises(SpeechToTextError) as exc:
        asyncio.run(client.transcribe(b"x"))
    assert exc.value.status_code == 401
    assert "invalid key" in exc.value.details


def test_empty_transcription_is_an_error():
    client = _client(lambda request: httpx.Response(200, json={"words": []}))
    with pytest.raises(SpeechToTextError) as exc:
        asyncio.run(client.transcribe(b"x"))
    assert exc.value.status_code == 500


@pytest.mark.parametrize(
    "payload",
    [
        {"text": "olá"},
        {"transcription": "olá"},
        {"result": {"text": "olá"}},
        {"data": {"text": "olá"}},
    ],
)
def test_extract_transcription_shapes(payload):
    assert extract_transcription(payload) == "olá"
