"""
Ability score resolution.

DDB scatters ability scores across base stats, bonus stats, override stats and
modifiers from race/class/items/feats. The resolver folds all of them into six
final scores.
"""

from __future__ import annotations

from typing import Any

from beyond_foundry.models import AbilityScore

from .modifiers import ModifierIndex
from .schema import (
    ABILITY_SCORE_SUBTYPES,
    DEFAULT_ABILITY_SCORE,
    GENERIC_ABILITY_SCORE_SUBTYPE,
    MAX_ABILITY_SCORE,
    MIN_ABILITY_SCORE,
    MODIFIER_TYPE_BONUS,
    MODIFIER_TYPE_SET,
    STAT_ID_MAP,
)


def ability_modifier(score: int) -> int:
    """Ability modifier for a score: floor((score - 10) / 2)."""
    return (score - 10) // 2


def _read_stat_list(entries: Any, label: str, warnings: list[str]) -> dict[int, int]:
    """Read a DDB ``[{id, value}]`` stat array into ``{stat_id: value}``.

    Entries with a null value are skipped silently (DDB uses them for
    "no override"); unknown ids and non-numeric values produce warnings.
    """
    values: dict[int, int] = {}
    if not isinstance(entries, list):
        if entries is not None:
            warnings.append(f"Ignoring malformed {label}: expected a list")
        return values

    for entry in entries:
        if not isinstance(entry, dict):
            continue
        stat_id = entry.get("id")
        raw = entry.get("value")
        if stat_id not in STAT_ID_MAP:
            warnings.append(f"Unknown ability stat id {stat_id!r} in {label}, ignored")
            continue
        if raw is None:
            continue
        try:
            values[stat_id] = int(raw)
        except (TypeError, ValueError):
            warnings.append(f"Non-numeric value {raw!r} for stat {stat_id} in {label}, ignored")
    return values


def resolve_abilities(ddb: dict, index: ModifierIndex) -> tuple[dict[str, AbilityScore], list[str]]:
    """Compute the six final ability scores.

    Order of application: base stat (default 10) + bonusStats + ``bonus``
    modifiers, then ``set`` modifiers raise the score to at least their value,
    then a non-null overrideStats entry replaces it. The result is clamped to
    [1, 30].

    Args:
        ddb: Raw D&D Beyond character JSON.
        index: Modifier index for the character.

    Returns:
        Tuple of (abilities, warnings); abilities maps ability key → AbilityScore.
    """
    warnings: list[str] = []
    abilities: dict[str, AbilityScore] = {}

    base_stats = _read_stat_list(ddb.get("stats"), "stats", warnings)
    bonus_stats = _read_stat_list(ddb.get("bonusStats"), "bonusStats", warnings)
    override_stats = _read_stat_list(ddb.get("overrideStats"), "overrideStats", warnings)

    score_subtypes = {key: subtype for subtype, key in ABILITY_SCORE_SUBTYPES.items()}

    for stat_id, key in STAT_ID_MAP.items():
        subtype = score_subtypes[key]

        score = base_stats.get(stat_id, DEFAULT_ABILITY_SCORE)
        score += bonus_stats.get(stat_id, 0)
        score += index.total(MODIFIER_TYPE_BONUS, subtype)
        score += sum(
            int(m.value or 0)
            for m in index.get(MODIFIER_TYPE_BONUS, GENERIC_ABILITY_SCORE_SUBTYPE)
            if m.ability_stat_id == stat_id
        )

        set_values = [int(m.value) for m in index.get(MODIFIER_TYPE_SET, subtype) if m.value is not None]
        if set_values:
            score = max(score, max(set_values))

        if stat_id in override_stats:
            score = override_stats[stat_id]

        if not MIN_ABILITY_SCORE <= score <= MAX_ABILITY_SCORE:
            clamped = min(MAX_ABILITY_SCORE, max(MIN_ABILITY_SCORE, score))
            warnings.append(f"Ability {key} score {score} out of range, clamped to {clamped}")
            score = clamped

        abilities[key] = AbilityScore(value=score)

    return abilities, warnings
