"""Tests for skill resolution."""

from beyond_foundry.importers.dndbeyond.abilities import resolve_abilities
from beyond_foundry.importers.dndbeyond.modifiers import ModifierIndex
from beyond_foundry.importers.dndbeyond.proficiencies import resolve_proficiencies
from beyond_foundry.importers.dndbeyond.skills import resolve_skills
from beyond_foundry.models import AbilityScore, ProficiencySet


def _flat_abilities(value=10):
    return {key: AbilityScore(value=value) for key in ("str", "dex", "con", "int", "wis", "cha")}


class TestResolveSkills:
    """total = mod + prof × tier, passive = 10 + total."""

    def test_all_eighteen_skills(self):
        skills = resolve_skills(_flat_abilities(), ProficiencySet(), 2)

        assert len(skills) == 18
        assert all(s.total == 0 and s.passive == 10 for s in skills.values())

    def test_governing_abilities(self):
        skills = resolve_skills(_flat_abilities(), ProficiencySet(), 2)

        assert skills["prc"].ability == "wis"
        assert skills["per"].ability == "cha"
        assert skills["itm"].ability == "cha"
        assert skills["ath"].ability == "str"
        assert skills["slt"].ability == "dex"

    def test_tiers(self):
        abilities = _flat_abilities()
        abilities["dex"] = AbilityScore(value=16)
        profs = ProficiencySet()
        profs.grant_skill("ste", 2)
        profs.grant_skill("acr", 1)

        skills = resolve_skills(abilities, profs, 3)

        assert skills["ste"].total == 9
        assert skills["ste"].passive == 19
        assert skills["ste"].value == 2
        assert skills["acr"].total == 6
        assert skills["slt"].total == 3
        assert skills["slt"].prof == 0

    def test_negative_modifier(self):
        abilities = _flat_abilities(8)
        skills = resolve_skills(abilities, ProficiencySet(), 2)
        assert skills["ath"].total == -1
        assert skills["ath"].passive == 9

    def test_sample_character(self, ddb_sample):
        index = ModifierIndex.from_character(ddb_sample)
        abilities, _ = resolve_abilities(ddb_sample, index)
        profs, _ = resolve_proficiencies(index)

        skills = resolve_skills(abilities, profs, 3)

        assert skills["arc"].total == 10
        assert skills["arc"].passive == 20
        assert skills["his"].total == 7
        assert skills["prc"].total == 4
        assert skills["prc"].passive == 14
        assert skills["per"].total == 0

    def test_to_system(self):
        skills = resolve_skills(_flat_abilities(), ProficiencySet(), 2)
        system = skills["inv"].to_system()

        assert system["ability"] == "int"
        assert system["value"] == 0
        assert system["passive"] == 10
        assert system["bonuses"] == {"check": "", "passive": ""}
