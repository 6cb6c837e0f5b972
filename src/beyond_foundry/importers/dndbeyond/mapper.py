"""
Orchestration of the D&D Beyond → Foundry dnd5e actor conversion.

Resolvers run in dependency order: modifier index, abilities, proficiencies,
classes and attributes, skills, spell slots, then the item mappers. Each
returns a (result, warnings) tuple; local defects degrade to documented
defaults and only a record without identity aborts the parse.
"""

from __future__ import annotations

import logging
from typing import Any

from beyond_foundry.models import AbilityScore, Attributes, CharacterClassInfo, ProficiencySet

from ..base import InvalidCharacterError, ParseResult
from .abilities import resolve_abilities
from .attributes import resolve_attributes, resolve_classes
from .equipment import map_inventory
from .features import map_features, resolve_languages
from .modifiers import ModifierIndex
from .proficiencies import resolve_proficiencies
from .schema import (
    ALIGNMENT_MAP,
    CURRENCY_KEYS,
    DEFAULT_ACTOR_IMG,
    MODULE_FLAG,
    PARSING_VERSION,
    XP_THRESHOLDS,
)
from .skills import resolve_skills
from .spell_slots import calculate_spell_slots
from .spells import map_spells

logger = logging.getLogger("beyond-foundry.mapper")

# Item types that count toward carried weight
_PHYSICAL_ITEM_TYPES = frozenset({"weapon", "equipment", "consumable", "tool", "container", "loot"})

# Appearance fields copied verbatim into details
_APPEARANCE_FIELDS = ("age", "height", "weight", "eyes", "skin", "hair", "gender", "faith")


def unwrap_character(source: Any) -> dict:
    """Return the character object, unwrapping a ``{"data": {...}}`` envelope.

    Raises:
        InvalidCharacterError: If the source is not a JSON object or has
            neither a name nor an id.
    """
    if isinstance(source, dict) and isinstance(source.get("data"), dict):
        source = source["data"]

    if not isinstance(source, dict):
        raise InvalidCharacterError(
            f"Invalid character data: expected a JSON object, got {type(source).__name__}"
        )
    if not source.get("name") and source.get("id") is None:
        raise InvalidCharacterError(
            "Invalid character data: record has neither a name nor an id. "
            "Ensure this is a D&D Beyond character export."
        )
    return source


def map_details(
    ddb: dict,
    classes: list[CharacterClassInfo],
    total_level: int,
) -> tuple[dict[str, Any], list[str]]:
    """Map race, background, alignment, classes, XP, biography and appearance."""
    warnings: list[str] = []

    race = ddb.get("race") if isinstance(ddb.get("race"), dict) else {}
    background = ddb.get("background") if isinstance(ddb.get("background"), dict) else {}
    background_def = background.get("definition")
    if not isinstance(background_def, dict):
        if background_def is not None:
            warnings.append("Malformed background definition, background left blank")
        background_def = {}
    if background.get("hasCustomBackground") and isinstance(background.get("customBackground"), dict):
        background_def = background["customBackground"]

    alignment_id = ddb.get("alignmentId")
    alignment = ALIGNMENT_MAP.get(alignment_id, "")
    if alignment_id is not None and not alignment:
        warnings.append(f"Unknown alignmentId {alignment_id!r}, alignment left blank")

    xp = ddb.get("currentXp")
    if not isinstance(xp, int) or isinstance(xp, bool):
        if xp is not None:
            warnings.append(f"Non-numeric currentXp {xp!r}, defaulting to 0")
        xp = 0
    xp_max = XP_THRESHOLDS[min(total_level, len(XP_THRESHOLDS) - 1)]

    notes = ddb.get("notes") if isinstance(ddb.get("notes"), dict) else {}
    traits = ddb.get("traits") if isinstance(ddb.get("traits"), dict) else {}

    details: dict[str, Any] = {
        "race": race.get("fullName") or race.get("baseName") or "",
        "background": background_def.get("name") or "",
        "alignment": alignment,
        "level": total_level,
        "classes": {
            cls.name.lower(): {
                "levels": cls.level,
                "subclass": cls.subclass or "",
                "hitDice": cls.hit_dice,
                "spellcasting": cls.spellcasting_ability or "",
            }
            for cls in classes
        },
        "xp": {"value": xp, "max": xp_max},
        "biography": {"value": notes.get("backstory") or "", "public": ""},
        "trait": traits.get("personalityTraits") or "",
        "ideal": traits.get("ideals") or "",
        "bond": traits.get("bonds") or "",
        "flaw": traits.get("flaws") or "",
    }
    for field in _APPEARANCE_FIELDS:
        value = ddb.get(field)
        details[field] = "" if value is None else str(value)

    return details, warnings


def map_currency(ddb: dict) -> tuple[dict[str, int], list[str]]:
    """Currency block with zero defaults."""
    warnings: list[str] = []
    raw = ddb.get("currencies") if isinstance(ddb.get("currencies"), dict) else {}
    currency: dict[str, int] = {}
    for key in CURRENCY_KEYS:
        value = raw.get(key, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            warnings.append(f"Non-numeric {key} currency {value!r}, defaulting to 0")
            value = 0
        currency[key] = int(value)
    return currency, warnings


def map_traits(ddb: dict, profs: ProficiencySet, size: str) -> dict[str, Any]:
    return {
        "size": size,
        "di": {"value": list(profs.immunities), "custom": ""},
        "dr": {"value": list(profs.resistances), "custom": ""},
        "dv": {"value": list(profs.vulnerabilities), "custom": ""},
        "ci": {"value": list(profs.condition_immunities), "custom": ""},
        "languages": resolve_languages(profs.languages, ddb),
        "weaponProf": {"value": list(profs.weapons), "custom": ""},
        "armorProf": {"value": list(profs.armor), "custom": ""},
        "toolProf": {"value": [], "custom": "; ".join(profs.tools)},
    }


def carried_weight(items: list[dict[str, Any]]) -> float:
    """Total weight of physical items (weight × quantity)."""
    total = 0.0
    for item in items:
        if item.get("type") not in _PHYSICAL_ITEM_TYPES:
            continue
        system = item.get("system", {})
        total += (system.get("weight") or 0) * (system.get("quantity") or 1)
    return round(total, 2)


def map_attributes(attributes: Attributes, strength: int, items: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "hp": attributes.hp.model_dump(),
        "ac": {"flat": None, "calc": "default", "formula": "", "value": attributes.ac_baseline},
        "movement": dict(attributes.movement),
        "senses": dict(attributes.senses),
        "prof": attributes.prof,
        "spellcasting": attributes.spellcasting,
        "spelldc": attributes.spelldc,
        "spellattack": attributes.spellattack,
        "encumbrance": {"value": carried_weight(items), "max": strength * 15},
    }


def build_actor(ddb: dict) -> tuple[dict[str, Any], list[str]]:
    """Run the full resolution pipeline on an already-validated character.

    Returns:
        Tuple of (Foundry actor dict, warnings).
    """
    all_warnings: list[str] = []

    index = ModifierIndex.from_character(ddb)
    logger.debug(f"🔍 Indexed {len(index)} modifiers")

    abilities, warnings = resolve_abilities(ddb, index)
    all_warnings.extend(warnings)

    profs, warnings = resolve_proficiencies(index)
    all_warnings.extend(warnings)

    abilities = {
        key: AbilityScore(value=score.value, proficient=profs.save_tier(key))
        for key, score in abilities.items()
    }

    classes, warnings = resolve_classes(ddb)
    all_warnings.extend(warnings)

    attributes, warnings = resolve_attributes(ddb, abilities, classes, index)
    all_warnings.extend(warnings)

    skills = resolve_skills(abilities, profs, attributes.prof)

    slots, warnings = calculate_spell_slots(classes, ddb)
    all_warnings.extend(warnings)

    details, warnings = map_details(ddb, classes, attributes.total_level)
    all_warnings.extend(warnings)

    currency, warnings = map_currency(ddb)
    all_warnings.extend(warnings)

    items: list[dict[str, Any]] = []
    equipment, warnings = map_inventory(ddb)
    items.extend(equipment)
    all_warnings.extend(warnings)

    spells, warnings = map_spells(ddb, attributes.spellcasting or None)
    items.extend(spells)
    all_warnings.extend(warnings)

    features, warnings = map_features(ddb)
    items.extend(features)
    all_warnings.extend(warnings)

    decorations = ddb.get("decorations") if isinstance(ddb.get("decorations"), dict) else {}

    actor = {
        "name": ddb.get("name") or "Unknown Character",
        "type": "character",
        "img": decorations.get("avatarUrl") or ddb.get("avatarUrl") or DEFAULT_ACTOR_IMG,
        "system": {
            "abilities": {key: score.to_system() for key, score in abilities.items()},
            "attributes": map_attributes(attributes, abilities["str"].value, items),
            "details": details,
            "traits": map_traits(ddb, profs, attributes.size),
            "currency": currency,
            "skills": {key: skill.to_system() for key, skill in skills.items()},
            "spells": slots.to_system(),
        },
        "items": items,
        "effects": [],
        "flags": {
            MODULE_FLAG: {
                "ddbCharacterId": ddb.get("id"),
                "parsingVersion": PARSING_VERSION,
            }
        },
    }
    return actor, all_warnings


def parse_character_result(source: Any) -> ParseResult:
    """Convert a D&D Beyond character into a Foundry actor, keeping the warnings.

    Args:
        source: Raw character JSON (optionally wrapped in ``{"data": ...}``).

    Returns:
        ParseResult with the actor and every non-fatal warning.

    Raises:
        InvalidCharacterError: If the source has no identity or is not an object.
    """
    ddb = unwrap_character(source)
    name = ddb.get("name") or "Unknown Character"
    logger.info(f"🔄 Parsing character '{name}' ({ddb.get('id')})")

    actor, warnings = build_actor(ddb)
    for warning in warnings:
        logger.warning(f"⚠️ {warning}")

    logger.info(f"✅ Parsed '{name}': {len(actor['items'])} items, {len(warnings)} warnings")
    source_id = ddb.get("id")
    return ParseResult(
        actor=actor,
        warnings=warnings,
        source_id=source_id if isinstance(source_id, int) else None,
    )


def parse_character(source: Any) -> dict[str, Any]:
    """Convert a D&D Beyond character into a Foundry dnd5e actor dict.

    Raises:
        InvalidCharacterError: If the source has no identity or is not an object.
    """
    return parse_character_result(source).actor
