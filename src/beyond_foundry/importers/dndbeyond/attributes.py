"""
Class list and derived attribute calculation.

Covers hit points, proficiency bonus, AC baseline, movement, senses, size and
the spellcasting ability / save DC / attack bonus of the primary caster class.
"""

from __future__ import annotations

import math
from typing import Any

from beyond_foundry.models import AbilityScore, Attributes, CharacterClassInfo, HitPoints

from .modifiers import ModifierIndex
from .schema import (
    ARMOR_CLASS_SUBTYPE,
    CLASS_HIT_DICE,
    CLASS_PROGRESSION,
    CLASS_SPELLCASTING_ABILITY,
    DEFAULT_WALK_SPEED,
    MODIFIER_TYPE_BONUS,
    MODIFIER_TYPE_SET,
    MODIFIER_TYPE_SET_BASE,
    RACE_SPEED_KEYS,
    SENSE_SUBTYPES,
    SIZE_ID_MAP,
    SIZE_MAP,
    SPEED_SUBTYPES,
    STAT_ID_MAP,
    SUBCLASS_PROGRESSION,
)


def proficiency_bonus(total_level: int) -> int:
    """Proficiency bonus for a total character level."""
    return max(2, math.ceil(total_level / 4) + 1)


def _as_int(value: Any, default: int, label: str, warnings: list[str]) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        warnings.append(f"Non-numeric {label} {value!r}, defaulting to {default}")
        return default


def resolve_classes(ddb: dict) -> tuple[list[CharacterClassInfo], list[str]]:
    """Read the character's class list.

    Each class is tagged with its spell slot progression family and
    spellcasting ability. Eldritch Knight and Arcane Trickster subclasses turn
    their (non-casting) parent class into a third caster.

    Args:
        ddb: Raw D&D Beyond character JSON.

    Returns:
        Tuple of (classes, warnings).
    """
    warnings: list[str] = []
    classes: list[CharacterClassInfo] = []

    raw_classes = ddb.get("classes")
    if not isinstance(raw_classes, list):
        if raw_classes is not None:
            warnings.append("Malformed classes list, treating character as classless")
        return classes, warnings

    for entry in raw_classes:
        if not isinstance(entry, dict):
            continue
        definition = entry.get("definition")
        if not isinstance(definition, dict):
            warnings.append(f"Class entry {entry.get('id')} has a malformed definition, skipped")
            continue
        name = definition.get("name")
        if not name:
            warnings.append("Class entry without a name skipped")
            continue

        level = _as_int(entry.get("level"), 1, f"{name} class level", warnings)
        if not 0 <= level <= 20:
            warnings.append(f"Class level {level} for {name} out of range, clamped")
            level = min(20, max(0, level))

        subclass_def = entry.get("subclassDefinition")
        subclass = (subclass_def.get("name") or None) if isinstance(subclass_def, dict) else None

        lower = name.lower()
        if lower not in CLASS_HIT_DICE:
            warnings.append(f"Unknown class '{name}' contributes no spell slots")

        hit_die = definition.get("hitDie")
        hit_dice = f"d{hit_die}" if isinstance(hit_die, int) and hit_die > 0 else CLASS_HIT_DICE.get(lower, "d8")

        progression = CLASS_PROGRESSION.get(lower)
        if progression is None and subclass:
            progression = SUBCLASS_PROGRESSION.get(subclass.lower())
        ability = class_spellcasting_ability(entry)

        classes.append(CharacterClassInfo(
            name=name,
            level=level,
            subclass=subclass,
            hit_dice=hit_dice,
            progression=progression,
            spellcasting_ability=ability,
        ))

    return classes, warnings


def total_level(classes: list[CharacterClassInfo]) -> int:
    """Sum of class levels, minimum 1."""
    return max(1, sum(c.level for c in classes))


def primary_spellcasting_class(classes: list[CharacterClassInfo]) -> CharacterClassInfo | None:
    """Highest-level class with a known spellcasting ability (first wins ties)."""
    casters = [c for c in classes if c.spellcasting_ability]
    if not casters:
        return None
    return max(casters, key=lambda c: c.level)


def resolve_hit_points(ddb: dict, con_mod: int, level: int) -> tuple[HitPoints, list[str]]:
    """Compute the hit point block.

    ``max`` is ``overrideHitPoints`` when set, otherwise
    ``baseHitPoints + bonusHitPoints + con_mod * level``.
    """
    warnings: list[str] = []

    override = ddb.get("overrideHitPoints")
    if override is not None:
        hp_max = _as_int(override, 0, "overrideHitPoints", warnings)
    else:
        base = _as_int(ddb.get("baseHitPoints"), 0, "baseHitPoints", warnings)
        bonus = _as_int(ddb.get("bonusHitPoints"), 0, "bonusHitPoints", warnings)
        hp_max = base + bonus + con_mod * level

    removed = _as_int(ddb.get("removedHitPoints"), 0, "removedHitPoints", warnings)
    temp = _as_int(ddb.get("temporaryHitPoints"), 0, "temporaryHitPoints", warnings)

    return HitPoints(value=max(0, hp_max - removed), max=hp_max, temp=temp, tempmax=0), warnings


def resolve_size(race: dict) -> str:
    size = race.get("size")
    if isinstance(size, str) and size.lower() in SIZE_MAP:
        return SIZE_MAP[size.lower()]
    return SIZE_ID_MAP.get(race.get("sizeId"), "med")


def resolve_movement(race: dict, index: ModifierIndex) -> dict[str, Any]:
    """Movement speeds: race base speeds, then set-base modifiers, then speed bonuses."""
    movement: dict[str, Any] = {
        "burrow": 0,
        "climb": 0,
        "fly": 0,
        "swim": 0,
        "walk": DEFAULT_WALK_SPEED,
        "units": "ft",
        "hover": False,
    }

    speeds = ((race.get("weightSpeeds") or {}).get("normal")) or {}
    if isinstance(speeds, dict):
        for ddb_key, key in RACE_SPEED_KEYS.items():
            value = speeds.get(ddb_key)
            if isinstance(value, (int, float)) and value > 0:
                movement[key] = int(value)

    # Source order matters: the last setter for a movement mode wins
    for mod in index:
        if mod.type not in (MODIFIER_TYPE_SET_BASE, MODIFIER_TYPE_SET):
            continue
        key = SPEED_SUBTYPES.get(mod.sub_type)
        if key is None:
            continue
        # "equal to your walking speed" grants carry no value
        movement[key] = int(mod.value) if mod.value is not None else movement["walk"]

    movement["walk"] += index.total(MODIFIER_TYPE_BONUS, "speed")
    return movement


def resolve_senses(index: ModifierIndex) -> dict[str, Any]:
    """Special senses from set-base modifiers (last-write-wins)."""
    senses: dict[str, Any] = {
        "darkvision": 0,
        "blindsight": 0,
        "tremorsense": 0,
        "truesight": 0,
        "units": "ft",
        "special": "",
    }
    for mod in index.of_type(MODIFIER_TYPE_SET_BASE):
        key = SENSE_SUBTYPES.get(mod.sub_type)
        if key and mod.value is not None:
            senses[key] = int(mod.value)
    return senses


def resolve_attributes(
    ddb: dict,
    abilities: dict[str, AbilityScore],
    classes: list[CharacterClassInfo],
    index: ModifierIndex,
) -> tuple[Attributes, list[str]]:
    """Compute derived attributes.

    Args:
        ddb: Raw D&D Beyond character JSON.
        abilities: Already-resolved ability scores.
        classes: Already-resolved class list.
        index: Modifier index for the character.

    Returns:
        Tuple of (Attributes, warnings).
    """
    warnings: list[str] = []
    level = total_level(classes)
    if not classes:
        warnings.append("No classes found, using total level 1")

    con_mod = abilities["con"].mod
    hp, hp_warnings = resolve_hit_points(ddb, con_mod, level)
    warnings.extend(hp_warnings)

    prof = proficiency_bonus(level)

    spellcasting = ""
    spell_mod = 0
    primary = primary_spellcasting_class(classes)
    if primary is not None:
        spellcasting = primary.spellcasting_ability or ""
        spell_mod = abilities[spellcasting].mod if spellcasting in abilities else 0

    race = ddb.get("race") if isinstance(ddb.get("race"), dict) else {}
    ac_baseline = 10 + abilities["dex"].mod + index.total(MODIFIER_TYPE_BONUS, ARMOR_CLASS_SUBTYPE)

    attributes = Attributes(
        hp=hp,
        prof=prof,
        total_level=level,
        ac_baseline=ac_baseline,
        movement=resolve_movement(race, index),
        senses=resolve_senses(index),
        spellcasting=spellcasting,
        spelldc=8 + prof + spell_mod,
        spellattack=prof + spell_mod,
        size=resolve_size(race),
    )
    return attributes, warnings


def class_spellcasting_ability(entry: dict) -> str | None:
    """Spellcasting ability for a raw DDB class entry, used when tagging its spells.

    Falls back to the definition's ``spellCastingAbilityId`` for classes
    missing from the fixed table (homebrew).
    """
    definition = entry.get("definition")
    if not isinstance(definition, dict):
        return None
    subclass_def = entry.get("subclassDefinition")
    name = (definition.get("name") or "").lower()
    subclass = ((subclass_def.get("name") if isinstance(subclass_def, dict) else None) or "").lower()
    ability = CLASS_SPELLCASTING_ABILITY.get(name) or CLASS_SPELLCASTING_ABILITY.get(subclass)
    if ability:
        return ability
    return STAT_ID_MAP.get(definition.get("spellCastingAbilityId"))
