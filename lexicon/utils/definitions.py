"""Word definitions from the Gemini API."""

import json
import logging
import re
from typing import Any, Dict

import requests

from ..engine.errors import DefinitionLookupError
from ..engine.models import VocabularyItem

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
DEFAULT_MODEL = "gemini-2.0-flash"

REQUIRED_FIELDS = ("word", "translation", "partOfSpeech", "definitions", "examples")


def build_prompt(word: str) -> str:
    return (
        f"You are Lexicon, an academic English-Turkish dictionary. Analyse the word: **{word}**.\n"
        "1. Decide whether the word is English or Turkish.\n"
        "2. If English: give its primary Turkish translation, phonetic transcription, "
        "part of speech, English definitions, English example sentences and etymology.\n"
        "3. If Turkish: give its primary English translation, part of speech, one Turkish "
        "definition and one Turkish example sentence. Phonetic and etymology may be empty.\n"
        "Use an empty string or empty list for anything you cannot find.\n"
        "Reply with JSON only, with exactly these fields:\n"
        "```json\n"
        "{\n"
        '  "word": "eloquent",\n'
        '  "translation": "belagatli",\n'
        '  "phonetic": "/ˈɛləkwənt/",\n'
        '  "partOfSpeech": "adjective",\n'
        '  "definitions": ["Fluent or persuasive in speaking or writing."],\n'
        '  "examples": ["An eloquent speech moved the crowd."],\n'
        '  "etymology": "From Latin eloquens, present participle of eloqui."\n'
        "}\n"
        "```"
    )


def parse_definition(text: str) -> Dict[str, Any]:
    """Extract the JSON object from a model reply, with or without a ```json fence."""
    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    raw = match.group(1) if match else text.strip()

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise DefinitionLookupError(f"JSON parsing failed: {e}") from e

    if not isinstance(parsed, dict):
        raise DefinitionLookupError("Definition payload is not a JSON object")

    missing = [name for name in REQUIRED_FIELDS if name not in parsed]
    if missing:
        raise DefinitionLookupError(f"Definition payload missing fields: {', '.join(missing)}")
    return parsed


class DefinitionClient:
    """Looks up words with Gemini and returns them as vocabulary items."""

    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, timeout: float = 30):
        if not api_key:
            raise ValueError("A Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def lookup(self, word: str) -> VocabularyItem:
        """Fetch the definition of ``word``.

        Raises:
            DefinitionLookupError: On network errors or an unusable response
        """
        word = word.strip()
        if not word:
            raise ValueError("Cannot look up an empty word")

        body = {
            "contents": [{"parts": [{"text": build_prompt(word)}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }

        logger.info("Looking up '%s' with %s", word, self.model)
        try:
            response = requests.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json=body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise DefinitionLookupError(f"Network error: {e}") from e
        except ValueError as e:
            raise DefinitionLookupError(f"Response was not JSON: {e}") from e

        if not result.get("candidates"):
            raise DefinitionLookupError(
                f"Gemini error: {result.get('error', 'No candidates returned')}"
            )

        try:
            content = result["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise DefinitionLookupError("Unexpected Gemini response shape") from e

        parsed = parse_definition(content)
        return VocabularyItem(
            word=parsed.get("word") or word,
            translation=parsed.get("translation") or "",
            phonetic=parsed.get("phonetic") or "",
            part_of_speech=parsed.get("partOfSpeech") or "",
            definitions=tuple(parsed.get("definitions") or ()),
            examples=tuple(parsed.get("examples") or ()),
            etymology=parsed.get("etymology") or "",
        )
