import logging
from pathlib import Path
from typing import Sequence

from fastapi.concurrency import run_in_threadpool

from podcaster.services.errors import MergeError
from podcaster.services.ffmpeg_runner import FFmpegRunner, concat_args

logger = logging.getLogger("podcaster.merge")

async def merge_clips(clips: Sequence[Path], output_path: Path, runner: FFmpegRunner) -> Path:
    """
    Concatenates the clips, in order, into output_path with one ffmpeg call.
    Input clips are deleted only after a successful merge; a failed merge
    never leaves a (partial) output file behind.
    """
    if not clips:
        raise MergeError("Nothing to merge: no clips were produced")

    result = await run_in_threadpool(runner.run, concat_args(clips, output_path))
    if not result.ok or not output_path.exists():
        output_path.unlink(missing_ok=True)
        logger.error(f"Merge into {output_path.name} failed: {result.stderr.strip()[-500:]}")
        raise MergeError(f"Failed to merge {len(clips)} clip(s)", stderr=result.stderr)

    for clip in clips:
        Path(clip).unlink(missing_ok=True)
    logger.info(f"Merged {len(clips)} clip(s) into {output_path.name}")
    return output_path
