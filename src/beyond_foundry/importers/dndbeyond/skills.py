"""
Skill resolution: the 18 dnd5e skills with totals and passive scores.
"""

from __future__ import annotations

from beyond_foundry.models import AbilityScore, ProficiencySet, SkillEntry

from .schema import SKILL_ABILITIES


def resolve_skills(
    abilities: dict[str, AbilityScore],
    proficiencies: ProficiencySet,
    prof_bonus: int,
) -> dict[str, SkillEntry]:
    """Build every skill entry.

    ``total = ability mod + prof_bonus * tier`` (tier 0, 1 or 2 for
    expertise) and ``passive = 10 + total``.
    """
    skills: dict[str, SkillEntry] = {}
    for key, ability in SKILL_ABILITIES.items():
        tier = proficiencies.skill_tier(key)
        mod = abilities[ability].mod
        prof = prof_bonus * tier
        total = mod + prof
        skills[key] = SkillEntry(
            ability=ability,
            value=tier,
            mod=mod,
            prof=prof,
            total=total,
            passive=10 + total,
        )
    return skills
