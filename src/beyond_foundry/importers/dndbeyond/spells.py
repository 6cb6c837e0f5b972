"""
Spell definition → Foundry spell item mapping.

DDB encodes spell mechanics inconsistently: range and duration arrive either
as structured objects or as free text ("150 feet", "1 minute"), activation
and attack kinds as numeric enums, damage as parallel type/dice arrays. Each
field is normalized independently with a safe default so that one odd field
never loses the whole spell.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from .attributes import class_spellcasting_ability
from .schema import (
    ABILITY_KEYS,
    ABILITY_NAME_TO_KEY,
    ACTIVATION_TYPE_MAP,
    CLASS_PROGRESSION,
    COMPONENT_TOKEN_PATTERN,
    DEFAULT_ACTIVATION,
    DEFAULT_DURATION_UNIT,
    DEFAULT_SPELL_IMG,
    DEFAULT_SPELL_SCHOOL,
    DEFAULT_TARGET_TYPE,
    DICE_PATTERN,
    DISTANCE_PATTERN,
    DURATION_UNIT_MAP,
    HTML_TAG_PATTERN,
    INNATE_SPELL_SOURCES,
    LIMITED_USE_RESET_MAP,
    MATERIAL_COST_PATTERN,
    MODULE_FLAG,
    PROGRESSION_PACT,
    RANGE_UNIT_MAP,
    SPELL_ATTACK_TYPE_MAP,
    SPELL_COMPONENT_CODES,
    SPELL_SCHOOL_MAP,
    STAT_ID_MAP,
    TARGET_TYPE_MAP,
)

logger = logging.getLogger("beyond-foundry.spells")

_DURATION_TEXT_PATTERN = re.compile(r"(\d+)\s+(round|minute|hour|day|week|month|year)s?", re.IGNORECASE)


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _strip_html(text: str) -> str:
    return HTML_TAG_PATTERN.sub(" ", text or "")


# ---------------------------------------------------------------------------
# Activation, duration, range and target
# ---------------------------------------------------------------------------

def parse_activation(definition: dict, warnings: list[str]) -> dict[str, Any]:
    """Activation block from the numeric ``activationType`` enum."""
    activation = definition.get("activation")
    if not isinstance(activation, dict):
        activation = {}

    code = activation.get("activationType")
    activation_type = ACTIVATION_TYPE_MAP.get(code)
    if activation_type is None:
        if code is not None:
            warnings.append(
                f"Unknown activation type {code!r} for spell '{definition.get('name')}', "
                f"defaulting to {DEFAULT_ACTIVATION}"
            )
        activation_type = DEFAULT_ACTIVATION

    cost = _int_or_none(activation.get("activationTime"))
    return {
        "type": activation_type,
        "cost": cost if cost is not None else 1,
        "condition": activation.get("activationCondition") or "",
    }


def parse_duration(definition: dict) -> dict[str, Any]:
    """Duration block from a structured duration object or free text."""
    duration = definition.get("duration")

    if isinstance(duration, str):
        match = _DURATION_TEXT_PATTERN.search(duration)
        if match:
            return {"value": int(match.group(1)), "units": match.group(2).lower()}
        for label, unit in DURATION_UNIT_MAP.items():
            if duration.strip().lower().startswith(label.lower()):
                return {"value": None, "units": unit}
        return {"value": None, "units": DEFAULT_DURATION_UNIT}

    if not isinstance(duration, dict):
        return {"value": None, "units": DEFAULT_DURATION_UNIT}

    # durationUnit is the precise unit ("Minute"); durationType is the kind
    # ("Concentration", "Time", "Instantaneous")
    unit = DURATION_UNIT_MAP.get(duration.get("durationUnit") or "")
    if unit is None:
        unit = DURATION_UNIT_MAP.get(duration.get("durationType") or "", DEFAULT_DURATION_UNIT)

    return {"value": _int_or_none(duration.get("durationInterval")), "units": unit}


def _parse_range_text(text: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Range and target from text such as ``"150 feet"`` or ``"Self (15-foot cone)"``."""
    range_block: dict[str, Any] = {"value": None, "long": None, "units": "ft"}
    target: dict[str, Any] = {"value": None, "width": None, "units": "ft", "type": DEFAULT_TARGET_TYPE}

    head, _, area = text.partition("(")
    head = head.strip()

    for origin, units in RANGE_UNIT_MAP.items():
        if head.lower().startswith(origin.lower()):
            range_block["units"] = units
            if origin in ("Self", "Touch"):
                target["type"] = TARGET_TYPE_MAP[origin]
            break
    else:
        match = DISTANCE_PATTERN.search(head)
        if match:
            range_block["value"] = int(match.group(1))
            range_block["units"] = "mi" if match.group(2).lower().startswith("mile") else "ft"

    if area:
        for shape, target_type in TARGET_TYPE_MAP.items():
            if shape.lower() in area.lower():
                target["type"] = target_type
                break
        match = DISTANCE_PATTERN.search(area)
        if match:
            target["value"] = int(match.group(1))

    return range_block, target


def parse_range_and_target(definition: dict) -> tuple[dict[str, Any], dict[str, Any]]:
    """Range and target blocks from ``{origin, rangeValue, aoeType, aoeValue}`` or text."""
    raw = definition.get("range")
    if isinstance(raw, str):
        return _parse_range_text(raw)
    if not isinstance(raw, dict):
        raw = {}

    origin = raw.get("origin") or ""
    range_block = {
        "value": _int_or_none(raw.get("rangeValue")),
        "long": None,
        "units": RANGE_UNIT_MAP.get(origin, "ft"),
    }

    target_key = raw.get("aoeType") or origin
    target = {
        "value": _int_or_none(raw.get("aoeValue")),
        "width": None,
        "units": "ft",
        "type": TARGET_TYPE_MAP.get(target_key, DEFAULT_TARGET_TYPE),
    }
    return range_block, target


# ---------------------------------------------------------------------------
# Damage, healing, save and scaling
# ---------------------------------------------------------------------------

def dice_formula(dice: dict) -> str:
    """Formula for a dice entry.

    Accepts both DDB key styles (``diceCount/diceValue/fixedValue`` and
    ``count/value/fixed``). A zero fixed term is omitted: ``{2, 6, 3}``
    gives ``"2d6 + 3"``, ``{1, 8, 0}`` gives ``"1d8"``. ``diceString`` is
    used verbatim only when the structured terms are missing.
    """
    count = dice.get("diceCount", dice.get("count"))
    value = dice.get("diceValue", dice.get("value"))
    fixed = dice.get("fixedValue", dice.get("fixed")) or 0

    if not value:
        if dice.get("diceString"):
            return str(dice["diceString"])
        return str(fixed) if fixed else ""
    formula = f"{count or 1}d{value}"
    if fixed:
        formula += f" + {fixed}"
    return formula


def parse_damage(definition: dict) -> list[list[str]]:
    """Damage parts as ``[formula, type]`` pairs.

    Zips ``damageTypes[]`` with ``dice[]``. When those are absent, falls back
    to ``damage`` modifiers attached to the definition.
    """
    parts: list[list[str]] = []

    damage_types = definition.get("damageTypes")
    dice = definition.get("dice")
    if isinstance(damage_types, list) and isinstance(dice, list):
        for damage_type, entry in zip(damage_types, dice):
            if not isinstance(entry, dict):
                continue
            formula = dice_formula(entry)
            if formula:
                parts.append([formula, str(damage_type).lower()])
    if parts:
        return parts

    for mod in definition.get("modifiers") or []:
        if not isinstance(mod, dict) or mod.get("type") != "damage":
            continue
        die = mod.get("die")
        formula = dice_formula(die) if isinstance(die, dict) else ""
        if formula:
            parts.append([formula, str(mod.get("subType") or "").lower()])
    return parts


def parse_healing(definition: dict) -> str:
    """Healing formula, or an empty string for non-healing spells."""
    healing_types = definition.get("healingTypes")
    dice = definition.get("dice")
    if healing_types and isinstance(dice, list) and dice and isinstance(dice[0], dict):
        return dice_formula(dice[0])

    for mod in definition.get("modifiers") or []:
        if isinstance(mod, dict) and mod.get("subType") == "hit-points" and isinstance(mod.get("die"), dict):
            formula = dice_formula(mod["die"])
            if formula:
                return formula
    return ""


def parse_save_ability(definition: dict) -> str | None:
    """Ability key of the spell's saving throw, or None when it has none."""
    for field in ("saveDcAbilityId", "saveType"):
        value = definition.get(field)
        if isinstance(value, int) and value in STAT_ID_MAP:
            return STAT_ID_MAP[value]
        if isinstance(value, str) and value:
            lowered = value.lower()
            if lowered in ABILITY_KEYS:
                return lowered
            if lowered in ABILITY_NAME_TO_KEY:
                return ABILITY_NAME_TO_KEY[lowered]
    return None


def parse_scaling(definition: dict) -> dict[str, str]:
    """Scaling formula extracted from the higher-level text.

    The first ``NdM`` in the text becomes the formula. Cantrips use mode
    ``cantrip``, leveled spells ``level``; no match gives mode ``none``.
    """
    level = definition.get("level") or 0
    text = _strip_html(definition.get("higherLevelDescription") or "")
    if not text and level == 0:
        # Cantrip scaling lives in the main description
        text = _strip_html(definition.get("description") or "")

    match = DICE_PATTERN.search(text)
    if not match:
        return {"mode": "none", "formula": ""}
    return {"mode": "cantrip" if level == 0 else "level", "formula": match.group(0)}


def parse_action_type(definition: dict, has_save: bool, damage: list, healing: str) -> str:
    attack = SPELL_ATTACK_TYPE_MAP.get(definition.get("attackType"))
    if attack:
        return attack
    if has_save:
        return "save"
    if healing:
        return "heal"
    if damage:
        return "other"
    return "util"


# ---------------------------------------------------------------------------
# Components and materials
# ---------------------------------------------------------------------------

def parse_components(definition: dict) -> dict[str, bool]:
    """Verbal/somatic/material plus ritual and concentration flags.

    Reads a structured ``{verbal, somatic, material}`` object, a list of
    numeric component codes, or a free-text ``"V, S, M"`` string.
    """
    raw = definition.get("components")
    vocal = somatic = material = False

    if isinstance(raw, dict):
        vocal = bool(raw.get("verbal") or raw.get("vocal"))
        somatic = bool(raw.get("somatic"))
        material = bool(raw.get("material"))
    elif isinstance(raw, list):
        codes = {SPELL_COMPONENT_CODES.get(code) for code in raw}
        vocal, somatic, material = "vocal" in codes, "somatic" in codes, "material" in codes
    elif isinstance(raw, str):
        tokens = set(COMPONENT_TOKEN_PATTERN.findall(raw))
        vocal, somatic, material = "V" in tokens, "S" in tokens, "M" in tokens

    duration = definition.get("duration")
    concentration = bool(definition.get("concentration")) or (
        isinstance(duration, dict) and duration.get("durationType") == "Concentration"
    )

    return {
        "vocal": vocal,
        "somatic": somatic,
        "material": material,
        "ritual": bool(definition.get("ritual")),
        "concentration": concentration,
    }


def parse_materials(definition: dict) -> dict[str, Any]:
    """Material component text, consumption and gp cost."""
    text = definition.get("componentsDescription") or ""
    cost = 0
    match = MATERIAL_COST_PATTERN.search(text)
    if match:
        cost = int(match.group(1).replace(",", ""))
    return {
        "value": text,
        "consumed": "consume" in text.lower(),
        "cost": cost,
        "supply": 0,
    }


# ---------------------------------------------------------------------------
# Preparation and uses
# ---------------------------------------------------------------------------

def parse_preparation(spell_instance: dict, level: int, source: str, pact: bool) -> dict[str, Any]:
    """Preparation mode from the instance flags and spell source.

    Only the instance's own ``alwaysPrepared`` flag yields ``always``; class
    lists of always-prepared spells are not synthesized.
    """
    prepared = bool(spell_instance.get("prepared"))
    if spell_instance.get("alwaysPrepared"):
        return {"mode": "always", "prepared": True}
    if source in INNATE_SPELL_SOURCES:
        return {"mode": "innate", "prepared": True}
    if pact and level > 0:
        return {"mode": "pact", "prepared": True}
    return {"mode": "prepared", "prepared": prepared or level == 0}


def parse_uses(spell_instance: dict) -> dict[str, Any]:
    limited = spell_instance.get("limitedUse")
    if not isinstance(limited, dict) or _int_or_none(limited.get("maxUses")) is None:
        return {"value": None, "max": "", "per": None}

    max_uses = int(limited["maxUses"])
    used = _int_or_none(limited.get("numberUsed")) or 0
    return {
        "value": max(0, max_uses - used),
        "max": str(max_uses),
        "per": LIMITED_USE_RESET_MAP.get(limited.get("resetType")),
    }


def parse_school(school: Any) -> str:
    return SPELL_SCHOOL_MAP.get(str(school or "").strip().lower(), DEFAULT_SPELL_SCHOOL)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def map_spell(
    spell_instance: dict,
    source: str = "class",
    ability: str | None = None,
    pact: bool = False,
) -> tuple[dict[str, Any] | None, list[str]]:
    """Map one DDB spell instance.

    Args:
        spell_instance: A spell record wrapping a ``definition``.
        source: Source category the spell was listed under (class, race, item ...).
        ability: Spellcasting ability of the granting class, if known.
        pact: True for spells granted by a pact-magic class.

    Returns:
        Tuple of (Foundry spell item dict or None when skipped, warnings).
    """
    warnings: list[str] = []
    definition = spell_instance.get("definition") if isinstance(spell_instance, dict) else None
    if not isinstance(definition, dict):
        spell_id = spell_instance.get("id") if isinstance(spell_instance, dict) else None
        warnings.append(f"Spell {spell_id} has no definition, skipped")
        return None, warnings

    name = definition.get("name") or "Unknown Spell"
    level = _int_or_none(definition.get("level")) or 0
    if not 0 <= level <= 9:
        warnings.append(f"Spell '{name}' has level {level}, clamped")
        level = min(9, max(0, level))

    range_block, target = parse_range_and_target(definition)
    damage = parse_damage(definition)
    healing = parse_healing(definition)
    save_ability = parse_save_ability(definition)
    components = parse_components(definition)

    if ability is None:
        ability = STAT_ID_MAP.get(spell_instance.get("spellCastingAbilityId"))

    system: dict[str, Any] = {
        "description": {
            "value": definition.get("description") or "",
            "chat": definition.get("snippet") or "",
            "unidentified": "",
        },
        "activation": parse_activation(definition, warnings),
        "duration": parse_duration(definition),
        "target": target,
        "range": range_block,
        "uses": parse_uses(spell_instance),
        "ability": ability or "",
        "actionType": parse_action_type(definition, save_ability is not None, damage, healing),
        "damage": {"parts": damage, "versatile": ""},
        "formula": healing,
        "level": level,
        "school": parse_school(definition.get("school")),
        "components": components,
        "properties": [key for key, value in components.items() if value],
        "materials": parse_materials(definition),
        "preparation": parse_preparation(spell_instance, level, source, pact),
        "scaling": parse_scaling(definition),
    }
    if save_ability is not None:
        system["save"] = {"ability": save_ability, "dc": None, "scaling": "spell"}

    foundry_spell = {
        "name": name,
        "type": "spell",
        "img": DEFAULT_SPELL_IMG,
        "system": system,
        "effects": [],
        "flags": {
            MODULE_FLAG: {
                "ddbId": spell_instance.get("id"),
                "definitionId": definition.get("id"),
                "source": source,
                "prepared": bool(spell_instance.get("prepared")),
                "alwaysPrepared": bool(spell_instance.get("alwaysPrepared")),
                "usesSpellSlot": spell_instance.get("usesSpellSlot") is not False,
                "isHomebrew": bool(definition.get("isHomebrew")),
            }
        },
    }
    return foundry_spell, warnings


def parse_spell(
    spell_instance: dict,
    source: str = "class",
    ability: str | None = None,
    pact: bool = False,
) -> dict[str, Any] | None:
    """Convert one DDB spell instance into a Foundry spell item.

    Usable on its own for incremental updates. Warnings are logged.

    Returns:
        Foundry spell item dict, or None if the instance has no definition.
    """
    spell, warnings = map_spell(spell_instance, source=source, ability=ability, pact=pact)
    for warning in warnings:
        logger.warning(f"⚠️ {warning}")
    return spell


def _map_entries(
    entries: Any,
    source: str,
    ability: str | None,
    pact: bool,
    items: list[dict[str, Any]],
    warnings: list[str],
) -> None:
    if not isinstance(entries, list):
        return
    for entry in entries:
        try:
            spell, spell_warnings = map_spell(entry, source=source, ability=ability, pact=pact)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            warnings.append(f"Spell parsing error in '{source}' spells: {e}")
            continue
        warnings.extend(spell_warnings)
        if spell is not None:
            items.append(spell)


def map_spells(ddb: dict, default_ability: str | None = None) -> tuple[list[dict[str, Any]], list[str]]:
    """Map every spell the character has.

    Reads the per-source ``spells`` mapping and the per-class ``classSpells``
    lists. Class spells are tagged with their own class's spellcasting
    ability; spells without a linked class use ``default_ability``.
    """
    warnings: list[str] = []
    items: list[dict[str, Any]] = []

    spells = ddb.get("spells")
    if isinstance(spells, dict):
        for source, entries in spells.items():
            _map_entries(entries, str(source), default_ability, False, items, warnings)
    elif spells is not None:
        warnings.append("Malformed spells mapping, ignored")

    classes_by_id = {
        entry.get("id"): entry
        for entry in ddb.get("classes") or []
        if isinstance(entry, dict) and entry.get("id") is not None
    }
    for class_spells in ddb.get("classSpells") or []:
        if not isinstance(class_spells, dict):
            continue
        class_entry = classes_by_id.get(class_spells.get("characterClassId"), {})
        class_def = class_entry.get("definition") if isinstance(class_entry.get("definition"), dict) else {}
        class_name = (class_def.get("name") or "").lower()
        ability = class_spellcasting_ability(class_entry) if class_entry else None
        pact = CLASS_PROGRESSION.get(class_name) == PROGRESSION_PACT
        _map_entries(class_spells.get("spells"), "class", ability or default_ability, pact, items, warnings)

    logger.debug(f"✨ Parsed {len(items)} spells")
    return items, warnings
