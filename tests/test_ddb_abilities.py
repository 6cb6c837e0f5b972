"""Tests for ability score resolution."""

import pytest

from beyond_foundry.importers.dndbeyond.abilities import ability_modifier, resolve_abilities
from beyond_foundry.importers.dndbeyond.modifiers import ModifierIndex


def _stats(**scores):
    ids = {"str": 1, "dex": 2, "con": 3, "int": 4, "wis": 5, "cha": 6}
    return [{"id": ids[key], "value": value} for key, value in scores.items()]


class TestAbilityModifier:
    """floor((score - 10) / 2) across the valid range."""

    @pytest.mark.parametrize("score,expected", [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (16, 3), (20, 5), (30, 10)])
    def test_modifier(self, score, expected):
        assert ability_modifier(score) == expected

    def test_formula_holds_for_every_score(self):
        for score in range(1, 31):
            assert ability_modifier(score) == (score - 10) // 2


class TestResolveAbilities:
    """Base stats, bonuses, set and override handling."""

    def test_sample_character(self, ddb_sample):
        abilities, warnings = resolve_abilities(ddb_sample, ModifierIndex.from_character(ddb_sample))

        assert {k: a.value for k, a in abilities.items()} == {
            "str": 8, "dex": 16, "con": 14, "int": 19, "wis": 12, "cha": 10,
        }
        assert abilities["int"].mod == 4
        assert warnings == []

    def test_missing_stat_defaults_to_ten(self):
        ddb = {"stats": _stats(str=15)}
        abilities, _ = resolve_abilities(ddb, ModifierIndex.from_groups({}))

        assert abilities["str"].value == 15
        assert abilities["wis"].value == 10
        assert set(abilities) == {"str", "dex", "con", "int", "wis", "cha"}

    def test_generic_ability_score_bonus_uses_stat_id(self):
        ddb = {"stats": _stats(cha=13)}
        index = ModifierIndex.from_groups({
            "feat": [{"type": "bonus", "subType": "ability-score", "statId": 6, "value": 1}],
        })
        abilities, _ = resolve_abilities(ddb, index)

        assert abilities["cha"].value == 14
        assert abilities["str"].value == 10

    def test_set_modifier_only_raises(self):
        ddb = {"stats": _stats(con=12, str=21)}
        index = ModifierIndex.from_groups({
            "item": [
                {"type": "set", "subType": "constitution-score", "value": 19},
                {"type": "set", "subType": "strength-score", "value": 19},
            ],
        })
        abilities, _ = resolve_abilities(ddb, index)

        assert abilities["con"].value == 19
        assert abilities["str"].value == 21

    def test_override_replaces_score(self):
        ddb = {
            "stats": _stats(dex=14),
            "bonusStats": [{"id": 2, "value": 2}],
            "overrideStats": [{"id": 2, "value": 11}, {"id": 3, "value": None}],
        }
        abilities, _ = resolve_abilities(ddb, ModifierIndex.from_groups({}))

        assert abilities["dex"].value == 11
        assert abilities["con"].value == 10

    def test_clamped_to_valid_range(self):
        ddb = {"stats": _stats(str=29, wis=1)}
        index = ModifierIndex.from_groups({
            "item": [{"type": "bonus", "subType": "strength-score", "value": 4}],
            "condition": [{"type": "bonus", "subType": "wisdom-score", "value": -3}],
        })
        abilities, warnings = resolve_abilities(ddb, index)

        assert abilities["str"].value == 30
        assert abilities["wis"].value == 1
        assert len(warnings) == 2

    def test_unknown_stat_id_warns(self):
        ddb = {"stats": [{"id": 7, "value": 18}, {"id": 1, "value": 12}]}
        abilities, warnings = resolve_abilities(ddb, ModifierIndex.from_groups({}))

        assert abilities["str"].value == 12
        assert any("7" in w for w in warnings)

    def test_non_numeric_value_warns(self):
        ddb = {"stats": [{"id": 1, "value": "strong"}]}
        abilities, warnings = resolve_abilities(ddb, ModifierIndex.from_groups({}))

        assert abilities["str"].value == 10
        assert len(warnings) == 1

    def test_malformed_stats_list(self):
        abilities, warnings = resolve_abilities({"stats": "nope"}, ModifierIndex.from_groups({}))

        assert all(a.value == 10 for a in abilities.values())
        assert "stats" in warnings[0]
