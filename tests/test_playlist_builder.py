"""
Unit tests for the initial playlist builder.

Tests difficulty pre-filtering, playlist IDs, under-fill detection,
and M3U / JSON output.
"""

import json
import pytest
from pathlib import Path
from commutr.recommend.catalog import Candidate
from commutr.recommend.playlist import (
    Playlist,
    build_playlist,
    export_playlist,
    make_playlist_id,
    write_m3u,
    write_playlist_json,
)


@pytest.fixture
def python_pool():
    """Python videos across three levels."""
    return [
        Candidate("py-basics-10", "https://youtube.com/watch?v=py10", "Python in 12 Minutes", 780,
                  ("python",), "pythonmadeeasy", "2024-03-01T12:00:00Z", "beginner"),
        Candidate("py-loops-02", "https://youtube.com/watch?v=py02", "Loops Explained", 420,
                  ("python",), "codewithsam", "2024-02-01T12:00:00Z", "beginner"),
        Candidate("py-advanced-23", "https://youtube.com/watch?v=py23", "Advanced Python Tricks", 680,
                  ("python",), "pythonmadeeasy", "2024-01-10T12:00:00Z", "advanced"),
        Candidate("py-async-04", "https://youtube.com/watch?v=py04", "Asyncio in Practice", 900,
                  ("python",), "corey", "2024-04-01T12:00:00Z", "intermediate"),
        Candidate("cooking-quick-pasta", "https://youtube.com/watch?v=pasta", "10-Minute Weeknight Pasta", 480,
                  ("cooking",), "kitchenlab", "2024-03-05T12:00:00Z", "beginner"),
    ]


class TestBuildPlaylist:
    """Test playlist orchestration."""

    def test_difficulty_prefilter(self, python_pool):
        """Only beginner python videos are considered."""
        playlist = build_playlist(python_pool, "python", 1200, difficulty="beginner")
        assert playlist is not None
        assert {v.id for v in playlist.videos} == {"py-basics-10", "py-loops-02"}
        assert playlist.total_duration_sec == 1200
        assert not playlist.under_filled

    def test_difficulty_fallback(self, python_pool):
        """No candidate at the level: whole pool is used."""
        pool = [c for c in python_pool if c.level != "intermediate"]
        playlist = build_playlist(pool, "python", 700, difficulty="intermediate")
        assert playlist is not None
        assert playlist.total_duration_sec <= 700 * 1.03

    def test_total_within_cap(self, python_pool):
        playlist = build_playlist(python_pool, "python", 1500)
        assert playlist.total_duration_sec <= 1500 * 1.03
        assert playlist.total_duration_sec == sum(v.duration_sec for v in playlist.videos)
        assert all(v.has_topic("python") for v in playlist.videos)

    def test_under_filled(self, python_pool):
        """Commute longer than all matching content."""
        playlist = build_playlist(python_pool, "python", 5000, difficulty="beginner")
        assert playlist.total_duration_sec == 1200
        assert playlist.under_filled
        assert playlist.to_dict()["underFilled"] is True

    def test_empty_pool(self):
        assert build_playlist([], "python", 1200) is None

    def test_no_topic_match(self, python_pool):
        assert build_playlist(python_pool, "astronomy", 1200) is None

    def test_explicit_id(self, python_pool):
        playlist = build_playlist(python_pool, "python", 900, playlist_id="pl_fixed")
        assert playlist.id == "pl_fixed"

    def test_generated_id(self, python_pool):
        playlist = build_playlist(python_pool, "Python", 900)
        assert playlist.id.startswith("pl_")
        assert playlist.id.endswith("_python")


class TestPlaylistId:
    def test_slug(self):
        assert make_playlist_id("Music  Theory", now_ms=123) == "pl_123_music-theory"


@pytest.fixture
def playlist(python_pool):
    return Playlist(
        id="pl_1_python",
        topic="python",
        difficulty="beginner",
        target_duration_sec=1200,
        total_duration_sec=1200,
        videos=tuple(python_pool[:2]),
        strategy="longest-first",
    )


class TestOutputs:
    """Test M3U and JSON writers."""

    def test_write_m3u(self, tmp_path, playlist):
        path = tmp_path / "playlist.m3u"
        assert write_m3u(playlist, path) is True

        lines = path.read_text().splitlines()
        assert lines[0] == "#EXTM3U"
        assert lines[1] == "#EXTINF:780,Python in 12 Minutes"
        assert lines[2] == "https://youtube.com/watch?v=py10"
        assert len(lines) == 5

    def test_write_json(self, tmp_path, playlist):
        path = tmp_path / "playlist.json"
        assert write_playlist_json(playlist, path) is True

        doc = json.loads(path.read_text())
        assert doc["id"] == "pl_1_python"
        assert doc["totalDurationSec"] == 1200
        assert doc["underFilled"] is False
        assert [v["id"] for v in doc["videos"]] == ["py-basics-10", "py-loops-02"]
        assert "generatedAt" in doc

    def test_write_failure_returns_false(self, tmp_path, playlist):
        assert write_m3u(playlist, tmp_path / "missing-dir" / "p.m3u") is False

    def test_export(self, tmp_path, playlist):
        result = export_playlist(playlist, str(tmp_path / "out"))
        assert result is not None
        m3u_path, json_path = result
        assert Path(m3u_path).name == "pl_1_python.m3u"
        assert Path(json_path).exists()
