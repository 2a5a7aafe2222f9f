"""Exception hierarchy for the podcast pipeline.

Services raise these; only the HTTP router turns them into responses.
"""

from typing import Optional

class PodcastError(RuntimeError):
    """Base class for every pipeline failure."""

class PodcastRequestError(PodcastError):
    """The caller's request is missing required fields."""

class ScriptFormatError(PodcastError):
    """The script generator returned something that is not a dialogue list."""

class CredentialsError(PodcastError):
    """Cloud TTS credential material could not be decoded."""

class SynthesisError(PodcastError):
    def __init__(self, message: str, *, line_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.line_index = line_index

class MergeError(PodcastError):
    def __init__(self, message: str, *, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr
