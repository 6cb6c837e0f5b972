"""
Proficiency, language and damage-defense resolution.

Scans the modifier index for proficiency-like grants and resolves duplicates:
the highest tier seen for a target wins, and an ``expertise`` grant always
lands on tier 2 regardless of where it appears in the source.
"""

from __future__ import annotations

from beyond_foundry.models import TIER_EXPERTISE, TIER_PROFICIENT, ProficiencySet

from .modifiers import Modifier, ModifierIndex
from .schema import (
    ARMOR_CATEGORY_SUBTYPES,
    CONDITION_TYPES,
    DAMAGE_TYPES,
    GENERIC_SAVING_THROW_SUBTYPE,
    MODIFIER_TYPE_EXPERTISE,
    MODIFIER_TYPE_IMMUNITY,
    MODIFIER_TYPE_LANGUAGE,
    MODIFIER_TYPE_PROFICIENCY,
    MODIFIER_TYPE_RESISTANCE,
    MODIFIER_TYPE_VULNERABILITY,
    SAVING_THROW_SUBTYPES,
    SKILL_SUBTYPES,
    SPECIFIC_WEAPON_SUBTYPES,
    STAT_ID_MAP,
    TOOL_SUBTYPE_SUFFIXES,
    TOOL_SUBTYPES,
    WEAPON_CATEGORY_SUBTYPES,
)


def skill_key_for(sub_type: str) -> str | None:
    """Foundry skill key for a DDB skill slug (``skill-`` prefix allowed)."""
    slug = sub_type.removeprefix("skill-")
    return SKILL_SUBTYPES.get(slug)


def save_key_for(mod: Modifier) -> str | None:
    """Ability key for a saving-throw modifier, or None if it is not one."""
    if mod.sub_type in SAVING_THROW_SUBTYPES:
        return SAVING_THROW_SUBTYPES[mod.sub_type]
    if mod.sub_type == GENERIC_SAVING_THROW_SUBTYPE:
        return STAT_ID_MAP.get(mod.ability_stat_id)
    return None


def is_tool_subtype(sub_type: str) -> bool:
    return sub_type in TOOL_SUBTYPES or sub_type.endswith(TOOL_SUBTYPE_SUFFIXES)


def _append_unique(values: list[str], value: str) -> None:
    if value and value not in values:
        values.append(value)


def _apply_tiered(profs: ProficiencySet, mod: Modifier, tier: int) -> bool:
    """Apply a save/skill grant. Returns True if the modifier was one."""
    save = save_key_for(mod)
    if save:
        profs.grant_save(save, tier)
        return True
    skill = skill_key_for(mod.sub_type)
    if skill:
        profs.grant_skill(skill, tier)
        return True
    return False


def resolve_proficiencies(index: ModifierIndex) -> tuple[ProficiencySet, list[str]]:
    """Resolve save, skill, weapon, armor and tool proficiencies plus languages.

    Args:
        index: Modifier index for the character.

    Returns:
        Tuple of (ProficiencySet, warnings).
    """
    warnings: list[str] = []
    profs = ProficiencySet()

    for mod in index.of_type(MODIFIER_TYPE_PROFICIENCY):
        if _apply_tiered(profs, mod, TIER_PROFICIENT):
            continue

        sub_type = mod.sub_type
        if sub_type in WEAPON_CATEGORY_SUBTYPES:
            _append_unique(profs.weapons, WEAPON_CATEGORY_SUBTYPES[sub_type])
        elif sub_type in SPECIFIC_WEAPON_SUBTYPES:
            _append_unique(profs.weapons, sub_type)
        elif sub_type in ARMOR_CATEGORY_SUBTYPES:
            _append_unique(profs.armor, ARMOR_CATEGORY_SUBTYPES[sub_type])
        elif is_tool_subtype(sub_type):
            _append_unique(profs.tools, mod.display_name)
        # Anything else is content we have no mapping for yet

    for mod in index.of_type(MODIFIER_TYPE_EXPERTISE):
        if not _apply_tiered(profs, mod, TIER_EXPERTISE) and is_tool_subtype(mod.sub_type):
            _append_unique(profs.tools, mod.display_name)

    for mod in index.of_type(MODIFIER_TYPE_LANGUAGE):
        _append_unique(profs.languages, mod.display_name)

    defenses, defense_warnings = resolve_defenses(index)
    warnings.extend(defense_warnings)
    profs.resistances = defenses["dr"]
    profs.immunities = defenses["di"]
    profs.vulnerabilities = defenses["dv"]
    profs.condition_immunities = defenses["ci"]

    return profs, warnings


def resolve_defenses(index: ModifierIndex) -> tuple[dict[str, list[str]], list[str]]:
    """Collect damage resistances, immunities, vulnerabilities and condition immunities.

    Returns:
        Tuple of ({"dr": [...], "di": [...], "dv": [...], "ci": [...]}, warnings).
    """
    warnings: list[str] = []
    result: dict[str, list[str]] = {"dr": [], "di": [], "dv": [], "ci": []}

    for mod_type, key in (
        (MODIFIER_TYPE_RESISTANCE, "dr"),
        (MODIFIER_TYPE_VULNERABILITY, "dv"),
        (MODIFIER_TYPE_IMMUNITY, "di"),
    ):
        for mod in index.of_type(mod_type):
            sub_type = mod.sub_type.lower()
            if sub_type in DAMAGE_TYPES:
                _append_unique(result[key], sub_type)
            elif mod_type == MODIFIER_TYPE_IMMUNITY and sub_type in CONDITION_TYPES:
                _append_unique(result["ci"], sub_type)
            elif sub_type:
                warnings.append(f"Unrecognized {mod_type} '{mod.sub_type}' ignored")

    return result, warnings
