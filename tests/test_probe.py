"""Tests for ffkit.probe — metadata and duration queries."""

import json

import pytest

from ffkit.errors import FfkitError, ProbeFailed
from ffkit.probe import DurationProbe, probe

from conftest import requires_ffmpeg


class TestDurationProbe:
    def test_reads_format_duration(self, fake_engine, media_file):
        fake_engine.probe_duration("12.480000")
        assert DurationProbe(fake_engine.config).duration(media_file) == pytest.approx(12.48)

        (call,) = fake_engine.calls("ffprobe")
        assert call == [
            "-hide_banner", "-of", "json", "-v", "error",
            "-show_entries", "format=duration", media_file,
        ]

    def test_absent_duration_is_zero(self, fake_engine, media_file):
        fake_engine.probe_duration(None)
        assert DurationProbe(fake_engine.config).duration(media_file) == 0.0

    def test_not_available_duration_is_zero(self, fake_engine, media_file):
        fake_engine.probe_duration("N/A")
        assert DurationProbe(fake_engine.config).duration(media_file) == 0.0

    def test_ffprobe_failure(self, fake_engine, media_file):
        fake_engine.respond("ffprobe", stderr="Invalid data found when processing input\n", returncode=1)
        with pytest.raises(ProbeFailed) as exc_info:
            DurationProbe(fake_engine.config).duration(media_file)
        assert exc_info.value.code == "PROBE_FAILED"
        assert "Invalid data" in exc_info.value.diagnostics

    def test_unparseable_output(self, fake_engine, media_file):
        fake_engine.respond("ffprobe", stdout="not json")
        with pytest.raises(ProbeFailed):
            DurationProbe(fake_engine.config).duration(media_file)

    def test_unlaunchable_ffprobe(self, fake_engine, media_file, tmp_path):
        config = fake_engine.config.with_overrides(ffprobe=str(tmp_path / "no-ffprobe"))
        with pytest.raises(ProbeFailed) as exc_info:
            DurationProbe(config).duration(media_file)
        exc = exc_info.value
        assert exc.code == "PROBE_FAILED"
        assert exc.context["cause"] == "FFPROBE_NOT_FOUND"
        assert any("FFKIT_FFMPEG" in hint for hint in exc.recovery)

    def test_missing_file(self, fake_engine):
        with pytest.raises(FfkitError) as exc_info:
            DurationProbe(fake_engine.config).duration("/nonexistent/file.mp4")
        assert exc_info.value.code == "INPUT_NOT_FOUND"
        assert fake_engine.calls("ffprobe") == []


class TestProbe:
    def test_streams_from_fake(self, fake_engine, media_file):
        fake_engine.respond("ffprobe", stdout=json.dumps({
            "format": {"duration": "5.000000", "format_name": "mov,mp4"},
            "streams": [
                {"index": 0, "codec_type": "video", "codec_name": "h264", "width": 640, "height": 480},
                {"index": 1, "codec_type": "audio", "codec_name": "aac"},
            ],
        }))
        result = probe(media_file, config=fake_engine.config)
        assert result.duration == 5.0
        assert result.has_video and result.has_audio
        d = result.to_dict()
        assert d["duration_formatted"] == "00:00:05.000"
        assert d["streams"][0] == {
            "index": 0, "codec_name": "h264", "codec_type": "video", "width": 640, "height": 480,
        }

    def test_file_not_found(self, fake_engine):
        with pytest.raises(FfkitError) as exc_info:
            probe("/nonexistent/file.mp4", config=fake_engine.config)
        assert exc_info.value.code == "INPUT_NOT_FOUND"


@requires_ffmpeg
class TestProbeWithFfmpeg:
    def test_basic_metadata(self, real_video_tone):
        result = probe(real_video_tone)
        assert result.duration == pytest.approx(3.0, abs=0.5)
        assert result.has_video
        assert result.has_audio

    def test_duration(self, real_video_tone):
        assert DurationProbe().duration(real_video_tone) == pytest.approx(3.0, abs=0.5)
