"""
Startup-time choice between Google Cloud TTS and the local OS voice.

The choice is made once, when the app starts, and frozen into a
SynthesisConfig that request handlers receive through a dependency. A
broken cloud setup never fails the process; it downgrades to the local
backend and says so in the log.
"""

import base64
import binascii
import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from google.cloud import texttospeech
from google.oauth2 import service_account

from podcaster.config import Settings
from podcaster.services.errors import CredentialsError
from podcaster.services.ffmpeg_runner import FFmpegRunner, RealFFmpegRunner
from podcaster.services.tts_backends import CloudBackend, LocalBackend, SynthesisBackend

logger = logging.getLogger("podcaster.tts")

CLEANUP_ALWAYS = "always"
CLEANUP_ON_SUCCESS = "on_success"

REQUIRED_FIELDS = ("client_email", "private_key")
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

# escaped sequences first so "\\r\\n" collapses to a single newline
_NEWLINE_RE = re.compile(r"\\r\\n|\\n|\\r|\r\n|\r")

@dataclass(frozen=True)
class CloudCredentials:
    """Where the cloud client gets its identity from. Both empty means ADC."""
    key_file: Optional[str] = None
    info: Optional[Dict[str, Any]] = None

@dataclass(frozen=True)
class SynthesisConfig:
    backend: SynthesisBackend
    runner: FFmpegRunner
    output_dir: Path
    cleanup: str = CLEANUP_ALWAYS

    @property
    def kind(self) -> str:
        return self.backend.name

    @property
    def keep_failed(self) -> bool:
        return self.cleanup == CLEANUP_ON_SUCCESS

def normalize_private_key(key: Any) -> Any:
    # env-injected keys arrive with literal "\n" and sometimes CRLF
    if not isinstance(key, str):
        return key
    return _NEWLINE_RE.sub("\n", key)

def decode_credentials_blob(raw: str) -> Dict[str, Any]:
    """
    Accepts base64-encoded JSON or raw JSON, in that order. The base64 form
    may be line-wrapped (as `base64 key.json` prints it) or unpadded.
    """
    compact = "".join(raw.split())
    compact += "=" * (-len(compact) % 4)
    try:
        decoded = base64.b64decode(compact, validate=True).decode("utf-8")
        data = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise CredentialsError(
                f"GOOGLE_TTS_CREDENTIALS is neither base64-encoded JSON nor raw JSON ({e})"
            ) from e
    if not isinstance(data, dict):
        raise CredentialsError("GOOGLE_TTS_CREDENTIALS must decode to a JSON object")
    return data

def service_account_info(data: Dict[str, Any]) -> Dict[str, Any]:
    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise CredentialsError(f"Credentials are missing: {', '.join(missing)}")
    info = dict(data)
    info["private_key"] = normalize_private_key(data["private_key"])
    info.setdefault("token_uri", DEFAULT_TOKEN_URI)
    return info

def credentials_path_variable(settings: Settings) -> Optional[str]:
    return settings.GOOGLE_TTS_CREDENTIALS_PATH or settings.GOOGLE_APPLICATION_CREDENTIALS

def wants_cloud(settings: Settings) -> bool:
    if settings.USE_GOOGLE_TTS:
        return True
    return bool(settings.GOOGLE_TTS_CREDENTIALS or credentials_path_variable(settings))

def load_cloud_credentials(settings: Settings) -> CloudCredentials:
    path = credentials_path_variable(settings)
    if path and os.path.isfile(path):
        return CloudCredentials(key_file=path)

    raw = settings.GOOGLE_TTS_CREDENTIALS
    if raw:
        if os.path.isfile(raw):
            return CloudCredentials(key_file=raw)
        return CloudCredentials(info=service_account_info(decode_credentials_blob(raw.strip())))

    return CloudCredentials()

def build_cloud_client(credentials: CloudCredentials):
    if credentials.key_file:
        return texttospeech.TextToSpeechClient.from_service_account_file(credentials.key_file)
    if credentials.info:
        creds = service_account.Credentials.from_service_account_info(credentials.info)
        return texttospeech.TextToSpeechClient(credentials=creds)
    return texttospeech.TextToSpeechClient()

def resolve_synthesis(
    settings: Settings,
    runner: Optional[FFmpegRunner] = None,
    client_factory: Callable[[CloudCredentials], Any] = build_cloud_client,
) -> SynthesisConfig:
    runner = runner or RealFFmpegRunner(settings.FFMPEG_BINARY)
    cleanup = settings.CLIP_CLEANUP.strip().lower()
    if cleanup not in (CLEANUP_ALWAYS, CLEANUP_ON_SUCCESS):
        logger.warning(f"Unknown CLIP_CLEANUP {settings.CLIP_CLEANUP!r}, using {CLEANUP_ALWAYS!r}")
        cleanup = CLEANUP_ALWAYS

    output_dir = Path(settings.OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)

    backend: Optional[SynthesisBackend] = None
    if wants_cloud(settings):
        try:
            client = client_factory(load_cloud_credentials(settings))
            backend = CloudBackend(client)
            logger.info("Using Google Cloud Text-to-Speech")
        except CredentialsError as e:
            logger.error(f"Google TTS credentials unusable, falling back to OS TTS: {e}")
        except Exception as e:
            logger.warning(f"Google TTS not available, falling back to OS TTS: {e}")

    if backend is None:
        backend = LocalBackend(runner, keep_failed=cleanup == CLEANUP_ON_SUCCESS)
        logger.info("Using OS text-to-speech")
        if not runner.available():
            logger.warning(f"{settings.FFMPEG_BINARY} is not runnable; OS voice clips cannot be converted or merged")

    return SynthesisConfig(backend=backend, runner=runner, output_dir=output_dir, cleanup=cleanup)
