"""
Character import from external platforms.

Currently supports:
- D&D Beyond (through the beyond-foundry relay, or local JSON file)
"""

from .dndbeyond.fetcher import fetch_character, read_character_file
from .dndbeyond.mapper import parse_character, parse_character_result
from .dndbeyond.equipment import parse_inventory_item
from .dndbeyond.spells import parse_spell
from .base import CharacterParseError, FetchError, InvalidCharacterError, ParseReport, ParseResult

__all__ = [
    "fetch_character",
    "read_character_file",
    "parse_character",
    "parse_character_result",
    "parse_inventory_item",
    "parse_spell",
    "ParseReport",
    "ParseResult",
    "CharacterParseError",
    "InvalidCharacterError",
    "FetchError",
]
