"""Shared test fixtures — a scriptable fake engine plus real-ffmpeg media."""

from __future__ import annotations

import json
import os
import shutil
import stat
import subprocess
import sys
from pathlib import Path

import pytest

from ffkit.config import EngineConfig

_FAKE_ENGINE = '''#!{python}
import json
import os
import sys

name = os.path.basename(sys.argv[0])
state = os.path.dirname(os.path.abspath(sys.argv[0]))
args = sys.argv[1:]

with open(os.path.join(state, name + ".calls"), "a") as fh:
    fh.write(json.dumps(args) + "\\n")

responses_path = os.path.join(state, name + ".responses.json")
responses = []
if os.path.exists(responses_path):
    with open(responses_path) as fh:
        responses = json.load(fh)

joined = " ".join(args)
for resp in responses:
    if resp["match"] is None or resp["match"] in joined:
        break
else:
    resp = {{"stdout": "", "stderr": "", "returncode": 0, "touch": True}}

if resp.get("touch") and args and args[-1] != "-":
    with open(args[-1], "w") as fh:
        fh.write("fake media")

sys.stdout.write(resp.get("stdout", ""))
sys.stderr.write(resp.get("stderr", ""))
sys.exit(resp.get("returncode", 0))
'''


class FakeEngine:
    """Executable stand-ins for ffmpeg/ffprobe that replay canned responses.

    Each binary records its argv (one JSON list per line) and answers with
    the first registered response whose ``match`` substring occurs in the
    joined arguments. Successful runs create the last argument as a file,
    mimicking an output being written.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        for name in ("ffmpeg", "ffprobe"):
            path = directory / name
            path.write_text(_FAKE_ENGINE.format(python=sys.executable))
            path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self._responses: dict[str, list[dict]] = {"ffmpeg": [], "ffprobe": []}

    @property
    def config(self) -> EngineConfig:
        return EngineConfig(
            ffmpeg=str(self.directory / "ffmpeg"),
            ffprobe=str(self.directory / "ffprobe"),
        )

    def respond(
        self,
        binary: str,
        match: str | None = None,
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        touch: bool | None = None,
    ) -> None:
        self._responses[binary].append({
            "match": match,
            "stdout": stdout,
            "stderr": stderr,
            "returncode": returncode,
            "touch": returncode == 0 if touch is None else touch,
        })
        (self.directory / f"{binary}.responses.json").write_text(
            json.dumps(self._responses[binary])
        )

    def probe_duration(self, duration) -> None:
        """Make ffprobe report ``format.duration``."""
        fmt = {} if duration is None else {"duration": str(duration)}
        self.respond("ffprobe", stdout=json.dumps({"format": fmt}), touch=False)

    def calls(self, binary: str) -> list[list[str]]:
        path = self.directory / f"{binary}.calls"
        if not path.exists():
            return []
        return [json.loads(line) for line in path.read_text().splitlines() if line]


@pytest.fixture
def fake_engine(tmp_path) -> FakeEngine:
    engine_dir = tmp_path / "engine"
    engine_dir.mkdir()
    return FakeEngine(engine_dir)


@pytest.fixture
def media_file(tmp_path) -> str:
    """An input path that exists (its contents are never read by the fake)."""
    path = tmp_path / "input.mp4"
    path.write_bytes(b"not really a video")
    return str(path)


@pytest.fixture
def output_dir(tmp_path) -> str:
    """Provide a temporary output directory for each test."""
    out = tmp_path / "out"
    out.mkdir()
    return str(out)


# ---------------------------------------------------------------------------
# Real ffmpeg fixtures
# ---------------------------------------------------------------------------

HAVE_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None

requires_ffmpeg = pytest.mark.skipif(not HAVE_FFMPEG, reason="ffmpeg/ffprobe not on PATH")


def _lavfi_video(out: str, audio_graph: str, duration: float) -> str:
    subprocess.run([
        "ffmpeg", "-y", "-hide_banner", "-loglevel", "error",
        "-f", "lavfi", "-i", f"testsrc=duration={duration}:size=320x240:rate=25",
        "-f", "lavfi", "-i", audio_graph,
        "-c:v", "libx264", "-preset", "ultrafast",
        "-c:a", "aac", "-b:a", "64k",
        "-pix_fmt", "yuv420p",
        "-shortest",
        out,
    ], check=True, capture_output=True)
    return out


@pytest.fixture(scope="session")
def real_video_with_silence(tmp_path_factory) -> str:
    """A 6-second video: 2s tone, 2s silence, 2s tone."""
    if not HAVE_FFMPEG:
        pytest.skip("ffmpeg/ffprobe not on PATH")
    out = str(tmp_path_factory.mktemp("media") / "gap.mp4")
    return _lavfi_video(
        out,
        "sine=frequency=440:duration=2[a0];"
        "anullsrc=r=44100:cl=mono:d=2[a1];"
        "sine=frequency=440:duration=2[a2];"
        "[a0][a1][a2]concat=n=3:v=0:a=1",
        6,
    )


@pytest.fixture(scope="session")
def real_video_tone(tmp_path_factory) -> str:
    """A 3-second video with a continuous tone (no silence)."""
    if not HAVE_FFMPEG:
        pytest.skip("ffmpeg/ffprobe not on PATH")
    out = str(tmp_path_factory.mktemp("media") / "tone.mp4")
    return _lavfi_video(out, "sine=frequency=440:duration=3", 3)


@pytest.fixture(autouse=True)
def _clean_ffkit_env(monkeypatch):
    """Keep the developer's FFKIT_* overrides out of the tests."""
    for key in list(os.environ):
        if key.startswith("FFKIT_"):
            monkeypatch.delenv(key, raising=False)
