from pathlib import Path

import pytest

from podcaster.services.errors import MergeError
from podcaster.services.ffmpeg_runner import concat_args, transcode_args
from podcaster.services.merger import merge_clips

from fakes import FakeFFmpegRunner

def _clips(tmp_path, n):
    clips = []
    for i in range(n):
        path = tmp_path / f"clip_tok_{i}.mp3"
        path.write_bytes(f"[{i}]".encode())
        clips.append(path)
    return clips

@pytest.mark.asyncio
@pytest.mark.parametrize("n", [1, 3, 10])
async def test_merge_passes_every_clip_in_order(tmp_path, n):
    runner = FakeFFmpegRunner()
    clips = _clips(tmp_path, n)
    output = tmp_path / "podcast_tok.mp3"

    result = await merge_clips(clips, output, runner)

    assert result == output
    assert len(runner.calls) == 1
    assert runner.calls[0].inputs == [str(c) for c in clips]
    assert output.read_bytes() == b"".join(f"[{i}]".encode() for i in range(n))
    assert [p.name for p in tmp_path.iterdir()] == ["podcast_tok.mp3"]

@pytest.mark.asyncio
async def test_failed_merge_keeps_inputs_and_writes_nothing(tmp_path):
    clips = _clips(tmp_path, 3)
    output = tmp_path / "podcast_tok.mp3"
    with pytest.raises(MergeError) as excinfo:
        await merge_clips(clips, output, FakeFFmpegRunner(fail_on_call=0))
    assert "fake ffmpeg error" in excinfo.value.stderr
    assert not output.exists()
    assert all(c.exists() for c in clips)

@pytest.mark.asyncio
async def test_merge_requires_clips(tmp_path):
    with pytest.raises(MergeError):
        await merge_clips([], tmp_path / "out.mp3", FakeFFmpegRunner())

def test_concat_filter_covers_all_inputs():
    args = concat_args([Path("a.mp3"), Path("b.mp3")], Path("out.mp3"))
    assert args[:5] == ["-y", "-i", "a.mp3", "-i", "b.mp3"]
    assert "[0:a][1:a]concat=n=2:v=0:a=1[out]" in args
    assert args[-1] == "out.mp3"

def test_transcode_targets_mp3():
    assert transcode_args(Path("in.wav"), Path("out.mp3")) == ["-y", "-i", "in.wav", "-f", "mp3", "out.mp3"]

def test_real_runner_reports_missing_binary():
    from podcaster.services.ffmpeg_runner import RealFFmpegRunner

    runner = RealFFmpegRunner(binary="ffmpeg-that-does-not-exist")
    result = runner.run(["-version"])
    assert result.returncode == -1
    assert "not found" in result.stderr
    assert runner.available() is False
