import asyncio
import httpx
import pytest

from scribe.whisper_asr_client import TranscriptionError, WhisperAsrClient


def make_client(handler) -> WhisperAsrClient:
    return WhisperAsrClient("http://asr.test:9000", transport=httpx.MockTransport(handler))


def test_transcribe_auto_language():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"text": " Hello there. ", "segments": [], "language": "en"})

    text = asyncio.run(make_client(handler).transcribe(b"RIFF....", "memo.wav"))

    request = seen["request"]
    assert text == "Hello there."
    assert request.url.path == "/asr"
    assert dict(request.url.params) == {"output": "json", "task": "transcribe", "encode": "true"}
    assert b'name="audio_file"; filename="memo.wav"' in request.read()


def test_transcribe_with_language():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"text": "Bonjour"})

    asyncio.run(make_client(handler).transcribe(b"x", "memo.mp3", language="fr"))
    assert seen["params"]["language"] == "fr"


def test_diarization_params():
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"text": "SPEAKER_00: hi"})

    text = asyncio.run(make_client(handler).transcribe_with_diarization(b"x", "call.webm", min_speakers=2, max_speakers=3))

    assert text == "SPEAKER_00: hi"
    assert seen["params"]["diarize"] == "true"
    assert seen["params"]["word_timestamps"] == "true"
    assert seen["params"]["min_speakers"] == "2"
    assert seen["params"]["max_speakers"] == "3"


def test_server_unreachable():
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(TranscriptionError, match="Is Docker running"):
        asyncio.run(make_client(handler).transcribe(b"x", "memo.wav"))


def test_http_error_status():
    def handler(request):
        return httpx.Response(422, text="bad audio")

    with pytest.raises(TranscriptionError, match="422 - bad audio"):
        asyncio.run(make_client(handler).transcribe(b"x", "memo.wav"))


def test_unexpected_body():
    def handler(request):
        return httpx.Response(200, json={"segments": []})

    with pytest.raises(TranscriptionError, match="unexpected response"):
        asyncio.run(make_client(handler).transcribe(b"x", "memo.wav"))
