"""
Synthesis backends.

Both variants render one dialogue line to an MP3 file at a caller-chosen
path. CloudBackend talks to Google Cloud Text-to-Speech; LocalBackend drives
the OS speech engine through pyttsx3 and transcodes its WAV output with
ffmpeg. The blocking parts run in the threadpool so other requests keep
being served.
"""

import base64
import binascii
import logging
import threading
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

import aiofiles
import pyttsx3
from fastapi.concurrency import run_in_threadpool
from google.cloud import texttospeech

from podcaster.models import SynthesisRequest
from podcaster.services.errors import SynthesisError
from podcaster.services.ffmpeg_runner import FFmpegRunner, transcode_args
from podcaster.services.voices import select_cloud_gender, select_local_voice

logger = logging.getLogger("podcaster.tts")

LANGUAGE_CODE = "en-US"
SPEAKING_RATE = 1.0

@runtime_checkable
class SynthesisBackend(Protocol):
    name: str

    async def synthesize(self, request: SynthesisRequest, target: Path) -> Path: ...

def decode_audio_content(content: Any) -> bytes:
    """Client libraries hand back either raw bytes or a base64 string."""
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    if isinstance(content, str):
        try:
            return base64.b64decode(content, validate=True)
        except binascii.Error as e:
            raise SynthesisError(f"Audio payload is not valid base64: {e}") from e
    raise SynthesisError(f"Unexpected audio payload type: {type(content).__name__}")

class CloudBackend:
    name = "cloud"

    def __init__(self, client: Any) -> None:
        self.client = client

    async def synthesize(self, request: SynthesisRequest, target: Path) -> Path:
        ssml_gender = texttospeech.SsmlVoiceGender[select_cloud_gender(request.gender)]
        try:
            response = await run_in_threadpool(
                self.client.synthesize_speech,
                input=texttospeech.SynthesisInput(text=request.line.text),
                voice=texttospeech.VoiceSelectionParams(
                    language_code=LANGUAGE_CODE,
                    ssml_gender=ssml_gender,
                ),
                audio_config=texttospeech.AudioConfig(
                    audio_encoding=texttospeech.AudioEncoding.MP3,
                ),
            )
        except Exception as e:
            raise SynthesisError(f"Google TTS request failed: {e}") from e

        audio = decode_audio_content(getattr(response, "audio_content", None))
        if not audio:
            raise SynthesisError("Google TTS returned no audio")

        async with aiofiles.open(target, "wb") as out_file:
            await out_file.write(audio)
        return target

def match_voice_id(voices, wanted: str) -> str:
    """
    Maps a voice name such as "Alex" or "Microsoft Zira Desktop" onto the
    driver's voice id. Falls back to the name itself, which espeak accepts
    directly for variants like "en+f3".
    """
    for voice in voices or []:
        name = getattr(voice, "name", "") or ""
        voice_id = getattr(voice, "id", "") or ""
        if name == wanted or name.startswith(wanted + " "):
            return voice_id
        if voice_id == wanted or voice_id.rsplit(".", 1)[-1] == wanted:
            return voice_id
    return wanted

class Pyttsx3Engine:
    """Renders text to a WAV file with the platform's pyttsx3 driver."""

    def __init__(self) -> None:
        self._base_rate: Optional[int] = None

    def render(self, text: str, voice: str, rate: float, output_path: Path) -> None:
        engine = pyttsx3.init()
        if self._base_rate is None:
            self._base_rate = int(engine.getProperty("rate"))
        engine.setProperty("voice", match_voice_id(engine.getProperty("voices"), voice))
        engine.setProperty("rate", int(self._base_rate * rate))
        engine.save_to_file(text, str(output_path))
        engine.runAndWait()
        if not output_path.exists():
            raise SynthesisError(f"OS voice engine produced no audio for voice {voice!r}")

class LocalBackend:
    name = "local"

    def __init__(
        self,
        runner: FFmpegRunner,
        engine: Optional[Pyttsx3Engine] = None,
        keep_failed: bool = False,
        platform: Optional[str] = None,
    ) -> None:
        self.runner = runner
        self.engine = engine or Pyttsx3Engine()
        self.keep_failed = keep_failed
        self.platform = platform
        # OS speech engines misbehave when driven from several threads at once
        self._render_lock = threading.Lock()

    def _render(self, text: str, voice: str, wav_path: Path) -> None:
        with self._render_lock:
            self.engine.render(text, voice, SPEAKING_RATE, wav_path)

    async def synthesize(self, request: SynthesisRequest, target: Path) -> Path:
        voice = select_local_voice(request.gender, self.platform)
        wav_path = target.with_suffix(".wav")
        succeeded = False
        try:
            await run_in_threadpool(self._render, request.line.text, voice, wav_path)
            result = await run_in_threadpool(self.runner.run, transcode_args(wav_path, target))
            if not result.ok:
                raise SynthesisError(f"WAV to MP3 conversion failed: {result.stderr.strip()[-500:]}")
            succeeded = True
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"OS voice engine failed: {e}") from e
        finally:
            if succeeded or not self.keep_failed:
                wav_path.unlink(missing_ok=True)
        return target
