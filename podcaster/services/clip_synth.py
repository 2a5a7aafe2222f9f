"""
Per-line clip synthesis.

Every clip of a request is named from a per-request token plus its line
index, so concurrent requests sharing the output directory never collide.
ClipBatch owns those files until the merge; leaving its ``with`` block on an
exception deletes them unless the batch was told to keep failed artefacts.
"""

import logging
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from podcaster.models import DialogueLine, GenderMap, SynthesisRequest
from podcaster.services.errors import SynthesisError
from podcaster.services.tts_backends import SynthesisBackend

logger = logging.getLogger("podcaster.clips")

class ClipBatch:
    def __init__(self, output_dir: Path, keep_failed: bool = False, token: Optional[str] = None) -> None:
        self.output_dir = Path(output_dir)
        self.keep_failed = keep_failed
        self.token = token or uuid.uuid4().hex
        self.paths: List[Path] = []

    def claim(self, index: int) -> Path:
        path = self.output_dir / f"clip_{self.token}_{index}.mp3"
        self.paths.append(path)
        return path

    def final_path(self) -> Path:
        return self.output_dir / f"podcast_{self.token}.mp3"

    def discard(self) -> int:
        removed = 0
        for path in self.paths:
            if path.exists():
                path.unlink()
                removed += 1
        return removed

    def __enter__(self) -> "ClipBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            return
        if self.keep_failed:
            left = sum(1 for path in self.paths if path.exists())
            logger.warning(f"Keeping {left} clip(s) of failed batch {self.token} in {self.output_dir}")
        else:
            removed = self.discard()
            logger.info(f"Removed {removed} clip(s) of failed batch {self.token}")

async def synthesize_all(
    lines: Sequence[DialogueLine],
    gender_map: GenderMap,
    backend: SynthesisBackend,
    batch: ClipBatch,
) -> List[Path]:
    """
    Synthesizes lines strictly in speaking order, one at a time, and returns
    the clip paths in that same order. The first failure aborts the batch.
    """
    clips: List[Path] = []
    for index, line in enumerate(lines):
        target = batch.claim(index)
        request = SynthesisRequest(line=line, gender=gender_map.get(line.speaker))
        try:
            clip = await backend.synthesize(request, target)
        except SynthesisError as e:
            e.line_index = index
            logger.error(f"Clip {index} ({line.speaker}) failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Clip {index} ({line.speaker}) failed: {e}")
            raise SynthesisError(f"Synthesis failed for line {index}: {e}", line_index=index) from e
        clips.append(clip)
    logger.debug(f"Synthesized {len(clips)} clip(s) with the {backend.name} backend")
    return clips
