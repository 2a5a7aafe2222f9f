"""
FFmpeg runner: wraps subprocess calls so the audio pipeline can be tested
without ffmpeg installed.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol, Sequence, runtime_checkable

logger = logging.getLogger("podcaster.ffmpeg")

@dataclass
class RunResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

@runtime_checkable
class FFmpegRunner(Protocol):
    def run(self, args: List[str]) -> RunResult: ...

    def available(self) -> bool: ...

class RealFFmpegRunner:
    """Runs ffmpeg via subprocess. Default in production."""

    def __init__(self, binary: str = "ffmpeg") -> None:
        self.binary = binary

    def run(self, args: List[str]) -> RunResult:
        cmd = [self.binary, *args]
        logger.debug(f"ffmpeg {' '.join(args)}")
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            return RunResult(returncode=-1, stderr=f"{self.binary} not found on PATH")
        return RunResult(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)

    def available(self) -> bool:
        return self.run(["-version"]).ok

def transcode_args(source: Path, target: Path) -> List[str]:
    return ["-y", "-i", str(source), "-f", "mp3", str(target)]

def concat_args(inputs: Sequence[Path], target: Path) -> List[str]:
    """
    Builds a single ffmpeg invocation that decodes every input and joins the
    audio streams in order with the concat filter.
    """
    args = ["-y"]
    for path in inputs:
        args += ["-i", str(path)]
    streams = "".join(f"[{i}:a]" for i in range(len(inputs)))
    args += [
        "-filter_complex", f"{streams}concat=n={len(inputs)}:v=0:a=1[out]",
        "-map", "[out]",
        str(target),
    ]
    return args
