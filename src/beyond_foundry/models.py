"""
Data models for resolved character sections.

Resolvers produce these pydantic models; the mapper dumps them into the
plain-dict Foundry actor returned to callers.
"""

from typing import Any

from pydantic import BaseModel, Field

# Proficiency tiers
TIER_NONE = 0
TIER_PROFICIENT = 1
TIER_EXPERTISE = 2


class AbilityScore(BaseModel):
    """D&D ability score with save proficiency tier."""
    value: int = Field(ge=1, le=30, description="Final ability score")
    proficient: int = Field(default=TIER_NONE, ge=0, le=2, description="Saving throw proficiency tier")

    @property
    def mod(self) -> int:
        """Calculate ability modifier."""
        return (self.value - 10) // 2

    def to_system(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "proficient": self.proficient,
            "mod": self.mod,
            "bonuses": {"check": "", "save": ""},
        }


class CharacterClassInfo(BaseModel):
    """One entry of the character's class list."""
    name: str
    level: int = Field(ge=0, le=20)
    subclass: str | None = None
    hit_dice: str = "d8"
    progression: str | None = Field(default=None, description="Spell slot progression family, if any")
    spellcasting_ability: str | None = None


class ProficiencySet(BaseModel):
    """Resolved proficiency grants.

    Tiers only ever move upwards: ``grant_save``/``grant_skill`` keep the
    highest tier seen for a key.
    """
    saves: dict[str, int] = Field(default_factory=dict, description="Ability key → tier")
    skills: dict[str, int] = Field(default_factory=dict, description="Skill key → tier")
    weapons: list[str] = Field(default_factory=list)
    armor: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    resistances: list[str] = Field(default_factory=list)
    immunities: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    condition_immunities: list[str] = Field(default_factory=list)

    def grant_save(self, ability: str, tier: int) -> None:
        self.saves[ability] = max(self.saves.get(ability, TIER_NONE), tier)

    def grant_skill(self, skill: str, tier: int) -> None:
        self.skills[skill] = max(self.skills.get(skill, TIER_NONE), tier)

    def save_tier(self, ability: str) -> int:
        return self.saves.get(ability, TIER_NONE)

    def skill_tier(self, skill: str) -> int:
        return self.skills.get(skill, TIER_NONE)


class HitPoints(BaseModel):
    """Hit point block."""
    value: int = Field(ge=0)
    max: int
    temp: int = 0
    tempmax: int = 0


class Attributes(BaseModel):
    """Derived combat and spellcasting attributes."""
    hp: HitPoints
    prof: int = Field(ge=2, description="Proficiency bonus")
    total_level: int = Field(ge=1)
    ac_baseline: int = Field(description="Unarmored AC: 10 + DEX mod + AC bonuses")
    movement: dict[str, Any] = Field(default_factory=dict)
    senses: dict[str, Any] = Field(default_factory=dict)
    spellcasting: str = Field(default="", description="Spellcasting ability key, empty for non-casters")
    spelldc: int = 8
    spellattack: int = 0
    size: str = "med"


class SkillEntry(BaseModel):
    """A single resolved skill."""
    ability: str
    value: int = Field(default=TIER_NONE, ge=0, le=2, description="Proficiency tier")
    mod: int = 0
    prof: int = 0
    total: int = 0
    passive: int = 10

    def to_system(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "ability": self.ability,
            "mod": self.mod,
            "prof": self.prof,
            "total": self.total,
            "passive": self.passive,
            "bonuses": {"check": "", "passive": ""},
        }


class SpellSlots(BaseModel):
    """Spell slot maxima and remaining counts."""
    maxima: list[int] = Field(default_factory=lambda: [0] * 9, description="Max slots for spell levels 1-9")
    remaining: list[int] = Field(default_factory=lambda: [0] * 9)
    pact_max: int = 0
    pact_value: int = 0
    pact_level: int = 0

    def to_system(self) -> dict[str, Any]:
        spells: dict[str, Any] = {}
        for idx, maximum in enumerate(self.maxima, start=1):
            spells[f"spell{idx}"] = {
                "value": self.remaining[idx - 1],
                "max": maximum,
                "override": None,
            }
        spells["pact"] = {
            "value": self.pact_value,
            "max": self.pact_max,
            "level": self.pact_level,
            "override": None,
        }
        return spells
