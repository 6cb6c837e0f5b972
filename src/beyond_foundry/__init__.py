"""
beyond-foundry - convert D&D Beyond character exports into Foundry VTT dnd5e actors.
"""

from .importers import (
    CharacterParseError,
    FetchError,
    InvalidCharacterError,
    ParseResult,
    fetch_character,
    parse_character,
    parse_character_result,
    parse_inventory_item,
    parse_spell,
    read_character_file,
)
from .config import Settings, load_settings
from .logutils import configure_logging

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("beyond-foundry")
except Exception:
    __version__ = "0.3.0"  # Fallback if metadata unavailable
__all__ = [
    "parse_character",
    "parse_character_result",
    "parse_spell",
    "parse_inventory_item",
    "fetch_character",
    "read_character_file",
    "ParseResult",
    "CharacterParseError",
    "InvalidCharacterError",
    "FetchError",
    "Settings",
    "load_settings",
    "configure_logging",
]
