"""Tests for ffkit.config — binary discovery and the engine config value."""

import dataclasses
import os

import pytest

from ffkit import config as config_mod
from ffkit.config import (
    EngineConfig,
    _try_env_dir,
    _try_env_exact,
    default_config,
    reset_cache,
)
from ffkit.errors import FfkitError

from conftest import requires_ffmpeg


def _fake_binary(directory, name):
    path = directory / name
    path.write_text("#!/bin/sh\n")
    return path


class TestEnvVarDiscovery:
    def test_env_exact_returns_none_when_unset(self):
        assert _try_env_exact("FFKIT_FFMPEG") is None

    def test_env_exact_returns_path_when_valid(self, tmp_path, monkeypatch):
        fake_bin = _fake_binary(tmp_path, "ffmpeg")
        monkeypatch.setenv("FFKIT_FFMPEG", str(fake_bin))
        assert _try_env_exact("FFKIT_FFMPEG") == str(fake_bin)

    def test_env_exact_ignores_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FFKIT_FFMPEG", str(tmp_path / "missing"))
        assert _try_env_exact("FFKIT_FFMPEG") is None

    def test_env_dir_returns_none_when_unset(self):
        assert _try_env_dir("ffmpeg") is None

    def test_env_dir_finds_binary(self, tmp_path, monkeypatch):
        fake_bin = _fake_binary(tmp_path, "ffprobe")
        monkeypatch.setenv("FFKIT_FFMPEG_DIR", str(tmp_path))
        assert _try_env_dir("ffprobe") == str(fake_bin)


class TestEngineConfig:
    def test_discover_prefers_env(self, tmp_path, monkeypatch):
        ffmpeg = _fake_binary(tmp_path, "my-ffmpeg")
        ffprobe = _fake_binary(tmp_path, "my-ffprobe")
        monkeypatch.setenv("FFKIT_FFMPEG", str(ffmpeg))
        monkeypatch.setenv("FFKIT_FFPROBE", str(ffprobe))
        config = EngineConfig.discover(timeout=30)
        assert config == EngineConfig(ffmpeg=str(ffmpeg), ffprobe=str(ffprobe), timeout=30)

    def test_discover_raises_when_nothing_found(self, monkeypatch):
        monkeypatch.setattr(config_mod, "discover_ffmpeg", lambda: "")
        with pytest.raises(FfkitError) as exc_info:
            EngineConfig.discover()
        assert exc_info.value.code == "FFMPEG_NOT_FOUND"
        assert exc_info.value.recovery

    def test_discover_needs_ffprobe_too(self, monkeypatch):
        monkeypatch.setattr(config_mod, "discover_ffmpeg", lambda: "/usr/bin/ffmpeg")
        monkeypatch.setattr(config_mod, "discover_ffprobe", lambda: "")
        with pytest.raises(FfkitError) as exc_info:
            EngineConfig.discover()
        assert exc_info.value.code == "FFPROBE_NOT_FOUND"

    def test_frozen(self):
        config = EngineConfig(ffmpeg="ffmpeg", ffprobe="ffprobe")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.timeout = 5

    def test_no_timeout_by_default(self):
        assert EngineConfig(ffmpeg="ffmpeg", ffprobe="ffprobe").timeout is None

    def test_with_overrides(self):
        base = EngineConfig(ffmpeg="a", ffprobe="b")
        assert base.with_overrides(timeout=10) == EngineConfig(ffmpeg="a", ffprobe="b", timeout=10)
        assert base.with_overrides(ffprobe="c").ffprobe == "c"
        assert base.with_overrides() == base


class TestCaching:
    def test_cache_returns_same_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FFKIT_FFMPEG", str(_fake_binary(tmp_path, "ffmpeg")))
        monkeypatch.setenv("FFKIT_FFPROBE", str(_fake_binary(tmp_path, "ffprobe")))
        reset_cache()
        try:
            assert default_config() is default_config()
        finally:
            reset_cache()

    def test_reset_cache_rediscovers(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FFKIT_FFPROBE", str(_fake_binary(tmp_path, "ffprobe")))
        monkeypatch.setenv("FFKIT_FFMPEG", str(_fake_binary(tmp_path, "ffmpeg")))
        reset_cache()
        first = default_config()
        other = _fake_binary(tmp_path, "ffmpeg2")
        monkeypatch.setenv("FFKIT_FFMPEG", str(other))
        reset_cache()
        try:
            assert default_config().ffmpeg == str(other)
            assert first.ffmpeg != str(other)
        finally:
            reset_cache()


@requires_ffmpeg
class TestFindBinaries:
    def test_discover_from_path(self):
        config = EngineConfig.discover()
        assert "ffmpeg" in os.path.basename(config.ffmpeg).lower()
        assert "ffprobe" in os.path.basename(config.ffprobe).lower()
