"""
Spell slot calculation.

DDB does not transmit slot maxima, so they are derived from class name and
level with the published progression tables. Each spellcasting class adds its
own table row; pact magic is tracked as a separate pool.
"""

from __future__ import annotations

from typing import Any

from beyond_foundry.models import CharacterClassInfo, SpellSlots

from .schema import (
    FULL_CASTER_SLOTS,
    HALF_CASTER_SLOTS,
    MAX_SPELL_LEVEL,
    PACT_MAGIC_SLOTS,
    PROGRESSION_ARTIFICER,
    PROGRESSION_FULL,
    PROGRESSION_HALF,
    PROGRESSION_PACT,
    PROGRESSION_THIRD,
    THIRD_CASTER_SLOTS,
)

_TABLES: dict[str, dict[int, tuple[int, ...]]] = {
    PROGRESSION_FULL: FULL_CASTER_SLOTS,
    PROGRESSION_HALF: HALF_CASTER_SLOTS,
    PROGRESSION_THIRD: THIRD_CASTER_SLOTS,
}


def class_slot_row(progression: str | None, level: int) -> list[int]:
    """Standard slot maxima (levels 1-9) granted by one class.

    Pact casters and unknown progressions return all zeros.
    """
    row = [0] * MAX_SPELL_LEVEL
    if level < 1 or progression is None:
        return row

    level = min(level, 20)
    if progression == PROGRESSION_ARTIFICER:
        # Artificers follow the half-caster table but already cast at level 1
        slots = HALF_CASTER_SLOTS[max(level, 2)]
    elif progression in _TABLES:
        slots = _TABLES[progression][level]
    else:
        return row

    for idx, count in enumerate(slots):
        row[idx] = count
    return row


def pact_slots(level: int) -> tuple[int, int]:
    """(slot count, slot level) of the warlock pact pool."""
    if level < 1:
        return 0, 0
    return PACT_MAGIC_SLOTS[min(level, 20)]


def _used_by_level(entries: Any) -> dict[int, int]:
    used: dict[int, int] = {}
    if not isinstance(entries, list):
        return used
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        level = entry.get("level")
        count = entry.get("used")
        if isinstance(level, int) and isinstance(count, int):
            used[level] = used.get(level, 0) + count
    return used


def calculate_spell_slots(
    classes: list[CharacterClassInfo],
    ddb: dict | None = None,
) -> tuple[SpellSlots, list[str]]:
    """Sum slot maxima across every spellcasting class.

    Args:
        classes: Resolved class list.
        ddb: Raw character JSON, used only for the ``spellSlots`` and
            ``pactMagic`` "used" counters.

    Returns:
        Tuple of (SpellSlots, warnings).
    """
    warnings: list[str] = []
    maxima = [0] * MAX_SPELL_LEVEL
    pact_max = 0
    pact_level = 0

    for cls in classes:
        if cls.progression == PROGRESSION_PACT:
            count, slot_level = pact_slots(cls.level)
            pact_max += count
            pact_level = max(pact_level, slot_level)
            continue
        for idx, count in enumerate(class_slot_row(cls.progression, cls.level)):
            maxima[idx] += count

    ddb = ddb or {}
    used = _used_by_level(ddb.get("spellSlots"))
    remaining = [max(0, maxima[i] - used.get(i + 1, 0)) for i in range(MAX_SPELL_LEVEL)]

    pact_used = sum(_used_by_level(ddb.get("pactMagic")).values())
    pact_value = max(0, pact_max - pact_used)

    for level, count in used.items():
        if 1 <= level <= MAX_SPELL_LEVEL and count > maxima[level - 1]:
            warnings.append(
                f"Source reports {count} used level {level} spell slots but only {maxima[level - 1]} derived"
            )

    return SpellSlots(
        maxima=maxima,
        remaining=remaining,
        pact_max=pact_max,
        pact_value=pact_value,
        pact_level=pact_level,
    ), warnings
