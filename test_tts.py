#!/usr/bin/env python3
"""Test pronunciation caching with edge-tts stubbed out."""

import sys
from pathlib import Path

import pytest

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from lexicon.utils import tts
from lexicon.utils.tts import PronunciationCache


@pytest.fixture
def communicate(monkeypatch):
    """Fake edge_tts.Communicate that records requests and writes dummy audio."""
    requests = []

    class FakeCommunicate:
        fail = False

        def __init__(self, text, voice):
            self.text = text
            self.voice = voice
            requests.append((text, voice))

        async def save(self, path):
            Path(path).write_bytes(b"partial")
            if FakeCommunicate.fail:
                raise ConnectionError("edge-tts unreachable")
            Path(path).write_bytes(b"ID3 fake mp3")

    FakeCommunicate.requests = requests
    monkeypatch.setattr(tts.edge_tts, "Communicate", FakeCommunicate)
    return FakeCommunicate


def test_generates_then_serves_from_cache(tmp_path, communicate):
    cache = PronunciationCache(tmp_path)

    first = cache.audio_path("eloquent")
    second = cache.audio_path(" eloquent ")

    assert first == second
    assert first.read_bytes() == b"ID3 fake mp3"
    assert communicate.requests == [("eloquent", "en-US-AriaNeural")]


def test_dialect_selects_voice(tmp_path, communicate):
    PronunciationCache(tmp_path, dialect="UK").audio_path("colour")
    assert communicate.requests == [("colour", "en-GB-SoniaNeural")]


def test_failed_generation_leaves_no_cache_file(tmp_path, communicate):
    communicate.fail = True
    cache = PronunciationCache(tmp_path)

    with pytest.raises(ConnectionError):
        cache.audio_path("eloquent")
    assert cache.get_cache_info()["files"] == 0


def test_cache_info_and_clear(tmp_path, communicate):
    cache = PronunciationCache(tmp_path)
    cache.audio_path("one")
    cache.audio_path("two")

    info = cache.get_cache_info()
    assert info["files"] == 2
    assert info["size"] == 2 * len(b"ID3 fake mp3")

    cache.clear_cache()
    assert cache.get_cache_info()["files"] == 0


def test_rejects_bad_input(tmp_path):
    with pytest.raises(ValueError):
        PronunciationCache(tmp_path, dialect="AU")
    with pytest.raises(ValueError):
        PronunciationCache(tmp_path).audio_path("  ")


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
