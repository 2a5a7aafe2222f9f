import base64
from types import SimpleNamespace
from unittest.mock import MagicMock, call, patch

import pytest
from google.cloud import texttospeech

from podcaster.models import DialogueLine, SynthesisRequest
from podcaster.services.errors import SynthesisError
from podcaster.services.tts_backends import (
    CloudBackend,
    LocalBackend,
    Pyttsx3Engine,
    decode_audio_content,
    match_voice_id,
)

from fakes import FakeFFmpegRunner, FakeVoiceEngine

def _request(gender=None, text="Hello there"):
    return SynthesisRequest(line=DialogueLine(speaker="Sam", text=text), gender=gender)

def _client(audio_content):
    client = MagicMock()
    client.synthesize_speech.return_value = SimpleNamespace(audio_content=audio_content)
    return client

@pytest.mark.asyncio
async def test_cloud_writes_raw_bytes(tmp_path):
    client = _client(b"ID3-mp3-bytes")
    target = tmp_path / "clip.mp3"

    result = await CloudBackend(client).synthesize(_request("male"), target)

    assert result == target
    assert target.read_bytes() == b"ID3-mp3-bytes"
    kwargs = client.synthesize_speech.call_args.kwargs
    assert kwargs["input"].text == "Hello there"
    assert kwargs["voice"].language_code == "en-US"
    assert kwargs["voice"].ssml_gender == texttospeech.SsmlVoiceGender.MALE
    assert kwargs["audio_config"].audio_encoding == texttospeech.AudioEncoding.MP3

@pytest.mark.asyncio
async def test_cloud_accepts_base64_payload(tmp_path):
    client = _client(base64.b64encode(b"encoded-audio").decode())
    target = tmp_path / "clip.mp3"
    await CloudBackend(client).synthesize(_request(), target)
    assert target.read_bytes() == b"encoded-audio"
    assert client.synthesize_speech.call_args.kwargs["voice"].ssml_gender == texttospeech.SsmlVoiceGender.NEUTRAL

@pytest.mark.asyncio
async def test_cloud_errors_become_synthesis_errors(tmp_path):
    client = MagicMock()
    client.synthesize_speech.side_effect = RuntimeError("quota exceeded")
    target = tmp_path / "clip.mp3"
    with pytest.raises(SynthesisError, match="quota exceeded"):
        await CloudBackend(client).synthesize(_request("female"), target)
    assert not target.exists()

@pytest.mark.asyncio
async def test_cloud_empty_audio_is_an_error(tmp_path):
    with pytest.raises(SynthesisError, match="no audio"):
        await CloudBackend(_client(b"")).synthesize(_request(), tmp_path / "clip.mp3")

def test_decode_audio_content_rejects_unknown_payloads():
    with pytest.raises(SynthesisError):
        decode_audio_content(None)
    with pytest.raises(SynthesisError):
        decode_audio_content("not base64!!")

def test_match_voice_id():
    voices = [
        SimpleNamespace(id="com.apple.speech.synthesis.voice.Alex", name="Alex"),
        SimpleNamespace(id="HKEY\\Voices\\TTS_MS_EN-US_ZIRA_11.0", name="Microsoft Zira Desktop - English (United States)"),
    ]
    assert match_voice_id(voices, "Alex") == "com.apple.speech.synthesis.voice.Alex"
    assert match_voice_id(voices, "Microsoft Zira Desktop") == "HKEY\\Voices\\TTS_MS_EN-US_ZIRA_11.0"
    assert match_voice_id(voices, "en+m3") == "en+m3"
    assert match_voice_id(None, "en+f3") == "en+f3"

@pytest.mark.asyncio
async def test_local_renders_wav_then_transcodes(tmp_path):
    engine = FakeVoiceEngine()
    runner = FakeFFmpegRunner()
    backend = LocalBackend(runner, engine=engine, platform="darwin")
    target = tmp_path / "clip_abc_0.mp3"

    result = await backend.synthesize(_request("male"), target)

    assert result == target
    assert target.exists()
    assert engine.calls == [{
        "text": "Hello there",
        "voice": "Alex",
        "rate": 1.0,
        "output_path": tmp_path / "clip_abc_0.wav",
    }]
    assert runner.calls[0].inputs == [str(tmp_path / "clip_abc_0.wav")]
    assert runner.calls[0].output == str(target)
    assert not (tmp_path / "clip_abc_0.wav").exists()

@pytest.mark.asyncio
async def test_local_transcode_failure_removes_wav(tmp_path):
    backend = LocalBackend(FakeFFmpegRunner(fail_on_call=0), engine=FakeVoiceEngine(), platform="linux")
    with pytest.raises(SynthesisError, match="conversion failed"):
        await backend.synthesize(_request(), tmp_path / "clip.mp3")
    assert list(tmp_path.iterdir()) == []

@pytest.mark.asyncio
async def test_local_keep_failed_leaves_wav(tmp_path):
    backend = LocalBackend(FakeFFmpegRunner(fail_on_call=0), engine=FakeVoiceEngine(), keep_failed=True)
    with pytest.raises(SynthesisError):
        await backend.synthesize(_request(), tmp_path / "clip.mp3")
    assert (tmp_path / "clip.wav").exists()

@pytest.mark.asyncio
async def test_local_engine_failure(tmp_path):
    runner = FakeFFmpegRunner()
    backend = LocalBackend(runner, engine=FakeVoiceEngine(fail=True), platform="win32")
    with pytest.raises(SynthesisError, match="voice engine crashed"):
        await backend.synthesize(_request("female"), tmp_path / "clip.mp3")
    assert runner.calls == []

def _pyttsx3_driver(writes_file=True):
    voices = [SimpleNamespace(id="com.apple.speech.synthesis.voice.Alex", name="Alex")]
    driver = MagicMock()
    driver.getProperty.side_effect = {"rate": 200, "voices": voices}.get
    saved = {}
    driver.save_to_file.side_effect = lambda text, path: saved.update(path=path)

    def run_and_wait():
        if writes_file:
            with open(saved["path"], "wb") as f:
                f.write(b"RIFF")

    driver.runAndWait.side_effect = run_and_wait
    return driver

def test_pyttsx3_engine_sets_voice_and_rate(tmp_path):
    driver = _pyttsx3_driver()
    wav_path = tmp_path / "clip.wav"
    with patch("podcaster.services.tts_backends.pyttsx3.init", return_value=driver):
        engine = Pyttsx3Engine()
        engine.render("Hello there", "Alex", 0.9, wav_path)

    assert driver.setProperty.call_args_list == [
        call("voice", "com.apple.speech.synthesis.voice.Alex"),
        call("rate", 180),
    ]
    driver.save_to_file.assert_called_once_with("Hello there", str(wav_path))
    assert wav_path.read_bytes() == b"RIFF"

def test_pyttsx3_engine_without_output_is_an_error(tmp_path):
    driver = _pyttsx3_driver(writes_file=False)
    with patch("podcaster.services.tts_backends.pyttsx3.init", return_value=driver):
        with pytest.raises(SynthesisError, match="produced no audio"):
            Pyttsx3Engine().render("Hello there", "en+m3", 1.0, tmp_path / "clip.wav")
    driver.setProperty.assert_any_call("voice", "en+m3")
