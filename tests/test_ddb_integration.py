"""End-to-end tests for the D&D Beyond → Foundry actor pipeline."""

import copy
import logging

import pytest

from beyond_foundry import InvalidCharacterError, parse_character, parse_character_result
from beyond_foundry.importers.base import CharacterParseError


class TestSampleCharacter:
    """Level 5 Wood Elf evocation wizard."""

    @pytest.fixture
    def actor(self, ddb_sample):
        return parse_character(ddb_sample)

    def test_identity(self, actor):
        assert actor["name"] == "Seren Ashvale"
        assert actor["type"] == "character"
        assert actor["img"] == "https://www.dndbeyond.com/avatars/48213977/seren.png"
        assert actor["flags"]["beyond-foundry"] == {"ddbCharacterId": 48213977, "parsingVersion": "3.1.0"}

    def test_abilities(self, actor):
        abilities = actor["system"]["abilities"]

        assert abilities["int"] == {"value": 19, "proficient": 1, "mod": 4, "bonuses": {"check": "", "save": ""}}
        assert abilities["wis"]["proficient"] == 1
        assert abilities["str"]["proficient"] == 0
        assert abilities["dex"]["value"] == 16

    def test_attributes(self, actor):
        attributes = actor["system"]["attributes"]

        assert attributes["hp"] == {"value": 32, "max": 37, "temp": 3, "tempmax": 0}
        assert attributes["ac"] == {"flat": None, "calc": "default", "formula": "", "value": 13}
        assert attributes["movement"]["walk"] == 35
        assert attributes["senses"]["darkvision"] == 60
        assert attributes["prof"] == 3
        assert attributes["spellcasting"] == "int"
        assert attributes["spelldc"] == 15
        assert attributes["spellattack"] == 7
        assert attributes["encumbrance"] == {"value": 30.0, "max": 120}

    def test_details(self, actor):
        details = actor["system"]["details"]

        assert details["race"] == "Wood Elf"
        assert details["background"] == "Sage"
        assert details["alignment"] == "ng"
        assert details["level"] == 5
        assert details["classes"] == {
            "wizard": {"levels": 5, "subclass": "School of Evocation", "hitDice": "d6", "spellcasting": "int"},
        }
        assert details["xp"] == {"value": 7000, "max": 14000}
        assert details["biography"]["value"] == "Raised among the archives of Silverymoon."
        assert details["age"] == "142"
        assert details["ideal"] == "Knowledge."

    def test_traits(self, actor):
        traits = actor["system"]["traits"]

        assert traits["size"] == "med"
        assert traits["dr"] == {"value": ["fire"], "custom": ""}
        assert traits["di"]["value"] == []
        assert traits["languages"]["value"] == ["common", "elvish", "draconic"]
        assert traits["weaponProf"]["value"] == ["longsword", "shortbow", "dagger", "quarterstaff", "light-crossbow"]

    def test_currency(self, actor):
        assert actor["system"]["currency"] == {"pp": 0, "gp": 45, "ep": 0, "sp": 12, "cp": 0}

    def test_skills(self, actor):
        skills = actor["system"]["skills"]

        assert len(skills) == 18
        assert skills["arc"]["value"] == 2
        assert skills["arc"]["total"] == 10
        assert skills["prc"]["passive"] == 14
        assert skills["per"]["ability"] == "cha"

    def test_spell_slots(self, actor):
        spells = actor["system"]["spells"]

        assert [spells[f"spell{i}"]["max"] for i in range(1, 10)] == [4, 3, 2, 0, 0, 0, 0, 0, 0]
        assert spells["spell1"]["value"] == 3
        assert spells["pact"]["max"] == 0

    def test_items(self, actor):
        counts = {}
        for item in actor["items"]:
            counts[item["type"]] = counts.get(item["type"], 0) + 1

        assert counts == {
            "weapon": 2,
            "equipment": 3,
            "consumable": 1,
            "container": 1,
            "tool": 1,
            "loot": 1,
            "spell": 5,
            "feat": 11,
        }
        assert all("beyond-foundry" in item["flags"] for item in actor["items"])

    def test_warnings(self, ddb_sample):
        result = parse_character_result(ddb_sample)

        assert result.source_id == 48213977
        assert len(result.warnings) == 3
        assert any("Unobtainium Widget" in w for w in result.warnings)

    def test_warnings_are_logged(self, ddb_sample, caplog):
        with caplog.at_level(logging.WARNING, logger="beyond-foundry"):
            parse_character(ddb_sample)
        assert "Unobtainium Widget" in caplog.text


class TestDruidScenario:
    """Level 3 druid with Druidic only mentioned in a racial trait."""

    def test_end_to_end(self, ddb_druid):
        result = parse_character_result(ddb_druid)
        system = result.actor["system"]

        assert result.actor["name"] == "Bramble Oakenshade"
        assert system["attributes"]["hp"]["max"] == 24
        assert system["attributes"]["prof"] == 2
        assert [system["spells"][f"spell{i}"]["max"] for i in range(1, 10)] == [4, 2, 0, 0, 0, 0, 0, 0, 0]
        assert "druidic" in system["traits"]["languages"]["value"]
        assert result.warnings == []

    def test_spellcasting_and_proficiencies(self, ddb_druid):
        system = parse_character(ddb_druid)["system"]

        assert system["attributes"]["spellcasting"] == "wis"
        assert system["attributes"]["spelldc"] == 13
        assert system["traits"]["armorProf"]["value"] == ["lgt", "med", "shl"]
        assert system["traits"]["toolProf"]["custom"] == "Herbalism Kit"
        assert system["details"]["alignment"] == "n"
        assert system["details"]["xp"] == {"value": 900, "max": 2700}
        assert system["currency"]["gp"] == 15


class TestIdempotence:
    """Same input, same output, input untouched."""

    def test_parse_twice(self, ddb_sample):
        assert parse_character(ddb_sample) == parse_character(ddb_sample)

    def test_source_not_mutated(self, ddb_sample):
        before = copy.deepcopy(ddb_sample)
        parse_character(ddb_sample)
        assert ddb_sample == before


class TestInvalidInput:
    """Only a record without identity aborts the parse."""

    @pytest.mark.parametrize("source", [None, [], "character", 42])
    def test_not_an_object(self, source):
        with pytest.raises(InvalidCharacterError):
            parse_character(source)

    def test_no_name_and_no_id(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            parse_character({"stats": [], "classes": []})
        assert "neither a name nor an id" in str(exc_info.value)

    def test_invalid_character_is_parse_error(self):
        with pytest.raises(CharacterParseError):
            parse_character({"data": {"classes": []}})

    def test_id_only(self):
        actor = parse_character({"id": 5})

        assert actor["name"] == "Unknown Character"
        assert actor["flags"]["beyond-foundry"]["ddbCharacterId"] == 5

    def test_minimal_character_gets_defaults(self):
        result = parse_character_result({"name": "Bare"})
        system = result.actor["system"]

        assert all(a["value"] == 10 for a in system["abilities"].values())
        assert system["attributes"]["prof"] == 2
        assert system["attributes"]["movement"]["walk"] == 30
        assert system["attributes"]["spellcasting"] == ""
        assert system["details"]["level"] == 1
        assert result.actor["items"] == []
        assert result.actor["img"] == "icons/svg/mystery-man.svg"
        assert any("No classes" in w for w in result.warnings)

    def test_malformed_sections_degrade(self):
        result = parse_character_result({
            "name": "Messy",
            "stats": "bad",
            "classes": "bad",
            "inventory": {"not": "a list"},
            "spells": ["bad"],
            "modifiers": ["bad"],
            "currencies": {"gp": "lots"},
        })

        assert result.actor["name"] == "Messy"
        assert result.actor["system"]["currency"]["gp"] == 0
        assert len(result.warnings) >= 5

    def test_malformed_class_definition_degrades(self):
        result = parse_character_result({"name": "X", "classes": [{"definition": "Wizard", "level": 5}]})
        system = result.actor["system"]

        assert system["details"]["level"] == 1
        assert system["details"]["classes"] == {}
        assert system["attributes"]["prof"] == 2
        assert any("malformed definition" in w for w in result.warnings)

    def test_malformed_background_definition_degrades(self):
        result = parse_character_result({"name": "X", "background": {"definition": "Sage"}})

        assert result.actor["system"]["details"]["background"] == ""
        assert any("background" in w for w in result.warnings)

    def test_malformed_class_spell_link(self):
        actor = parse_character({
            "name": "X",
            "classes": [{"id": 4, "definition": ["Wizard"], "level": 1}],
            "classSpells": [{"characterClassId": 4, "spells": [
                {"id": 1, "definition": {"id": 10, "name": "Light", "level": 0}},
            ]}],
        })
        assert [i["name"] for i in actor["items"]] == ["Light"]


class TestHomebrewCaster:
    """A class outside the fixed tables still gets its spellcasting ability."""

    def test_actor_and_spells_share_ability(self):
        actor = parse_character({
            "name": "Hex",
            "stats": [{"id": 6, "value": 16}],
            "classes": [{"id": 12, "level": 3, "definition": {"name": "Witch", "spellCastingAbilityId": 6}}],
            "classSpells": [{"characterClassId": 12, "spells": [
                {"id": 1, "definition": {"id": 10, "name": "Hex Bolt", "level": 1}},
            ]}],
        })
        spell = next(i for i in actor["items"] if i["type"] == "spell")

        assert actor["system"]["attributes"]["spellcasting"] == "cha"
        assert actor["system"]["attributes"]["spelldc"] == 13
        assert spell["system"]["ability"] == "cha"
