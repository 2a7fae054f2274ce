"""Pronunciation audio with edge-tts and an on-disk cache."""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Optional

import edge_tts

from .config import DIALECTS, default_home

logger = logging.getLogger(__name__)

VOICES = {
    "US": "en-US-AriaNeural",
    "UK": "en-GB-SoniaNeural",
}


class PronunciationCache:
    """Generates word pronunciations once and serves them from disk."""

    def __init__(self, cache_dir: Optional[Path] = None, dialect: str = "US"):
        if dialect not in DIALECTS:
            raise ValueError(f"dialect must be one of {DIALECTS}, got {dialect!r}")
        self.voice = VOICES[dialect]
        self.cache_dir = Path(cache_dir) if cache_dir else default_home() / "tts_cache"
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _cache_file(self, text: str) -> Path:
        cache_key = hashlib.md5(f"{text}_{self.voice}".encode()).hexdigest()
        return self.cache_dir / f"{cache_key}.mp3"

    def audio_path(self, word: str) -> Path:
        """Path to an mp3 of ``word``, generating it on a cache miss."""
        text = word.strip()
        if not text:
            raise ValueError("Cannot pronounce an empty word")

        cache_file = self._cache_file(text)
        if cache_file.exists():
            return cache_file

        logger.info("Generating pronunciation for '%s' (%s)", text, self.voice)
        try:
            asyncio.run(self._generate(text, cache_file))
        except Exception:
            # A partial file would be served as a cache hit
            cache_file.unlink(missing_ok=True)
            raise
        return cache_file

    async def _generate(self, text: str, cache_file: Path) -> None:
        communicate = edge_tts.Communicate(text, self.voice)
        await communicate.save(str(cache_file))

    def get_cache_info(self) -> dict:
        """Get cache statistics."""
        files = list(self.cache_dir.glob("*.mp3"))
        total_size = sum(f.stat().st_size for f in files)

        return {
            "files": len(files),
            "size": total_size,
            "size_mb": total_size / (1024 * 1024)
        }

    def clear_cache(self) -> None:
        """Clear all cached audio files."""
        for file in self.cache_dir.glob("*.mp3"):
            file.unlink()
