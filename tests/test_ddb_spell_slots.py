"""Tests for spell slot derivation."""

from beyond_foundry.importers.dndbeyond.attributes import resolve_classes
from beyond_foundry.importers.dndbeyond.spell_slots import (
    calculate_spell_slots,
    class_slot_row,
    pact_slots,
)


def _classes(*entries):
    ddb = {"classes": [
        {"level": level, "definition": {"name": name}, "subclassDefinition": {"name": sub} if sub else None}
        for name, level, sub in entries
    ]}
    classes, _ = resolve_classes(ddb)
    return classes


class TestSingleClass:
    """Published progression tables."""

    def test_level_5_wizard(self):
        slots, warnings = calculate_spell_slots(_classes(("Wizard", 5, None)))
        assert slots.maxima == [4, 3, 2, 0, 0, 0, 0, 0, 0]
        assert warnings == []

    def test_level_5_paladin(self):
        slots, _ = calculate_spell_slots(_classes(("Paladin", 5, None)))
        assert slots.maxima == [4, 2, 0, 0, 0, 0, 0, 0, 0]

    def test_level_1_paladin_has_no_slots(self):
        slots, _ = calculate_spell_slots(_classes(("Paladin", 1, None)))
        assert slots.maxima == [0] * 9

    def test_level_20_full_caster(self):
        slots, _ = calculate_spell_slots(_classes(("Cleric", 20, None)))
        assert slots.maxima == [4, 3, 3, 3, 3, 2, 2, 1, 1]

    def test_half_caster_caps_at_fifth_level(self):
        slots, _ = calculate_spell_slots(_classes(("Ranger", 20, None)))
        assert slots.maxima == [4, 3, 3, 3, 2, 0, 0, 0, 0]

    def test_third_caster(self):
        assert class_slot_row("third", 2) == [0] * 9
        slots, _ = calculate_spell_slots(_classes(("Fighter", 7, "Eldritch Knight")))
        assert slots.maxima == [4, 2, 0, 0, 0, 0, 0, 0, 0]

    def test_third_caster_caps_at_fourth_level(self):
        slots, _ = calculate_spell_slots(_classes(("Rogue", 20, "Arcane Trickster")))
        assert slots.maxima == [4, 3, 3, 1, 0, 0, 0, 0, 0]

    def test_artificer_casts_at_level_1(self):
        slots, _ = calculate_spell_slots(_classes(("Artificer", 1, None)))
        assert slots.maxima == [2, 0, 0, 0, 0, 0, 0, 0, 0]

    def test_non_caster_and_unknown_class(self):
        slots, _ = calculate_spell_slots(_classes(("Barbarian", 10, None), ("Gunslinger", 5, None)))
        assert slots.maxima == [0] * 9
        assert slots.pact_max == 0


class TestPactMagic:
    """Warlock slots stay in their own pool."""

    def test_pact_table(self):
        assert pact_slots(1) == (1, 1)
        assert pact_slots(5) == (2, 3)
        assert pact_slots(11) == (3, 5)
        assert pact_slots(0) == (0, 0)

    def test_warlock_has_no_standard_slots(self):
        slots, _ = calculate_spell_slots(_classes(("Warlock", 5, None)))

        assert slots.maxima == [0] * 9
        assert slots.pact_max == 2
        assert slots.pact_level == 3
        assert slots.pact_value == 2


class TestMulticlass:
    """Per-level maxima are summed across classes."""

    def test_wizard_paladin(self):
        slots, _ = calculate_spell_slots(_classes(("Wizard", 5, None), ("Paladin", 5, None)))
        assert slots.maxima == [8, 5, 2, 0, 0, 0, 0, 0, 0]

    def test_sorcerer_warlock(self):
        slots, _ = calculate_spell_slots(_classes(("Sorcerer", 3, None), ("Warlock", 2, None)))

        assert slots.maxima == [4, 2, 0, 0, 0, 0, 0, 0, 0]
        assert slots.pact_max == 2
        assert slots.pact_level == 1


class TestRemainingSlots:
    """Remaining counts come from the source's used counters."""

    def test_used_slots(self, ddb_sample):
        classes, _ = resolve_classes(ddb_sample)
        slots, warnings = calculate_spell_slots(classes, ddb_sample)

        assert slots.remaining == [3, 3, 2, 0, 0, 0, 0, 0, 0]
        assert warnings == []

    def test_overused_slots_warn(self):
        ddb = {"spellSlots": [{"level": 4, "used": 1}]}
        slots, warnings = calculate_spell_slots(_classes(("Wizard", 5, None)), ddb)

        assert slots.remaining[3] == 0
        assert len(warnings) == 1

    def test_pact_used(self):
        ddb = {"pactMagic": [{"level": 3, "used": 1}]}
        slots, _ = calculate_spell_slots(_classes(("Warlock", 5, None)), ddb)
        assert slots.pact_value == 1

    def test_to_system(self):
        slots, _ = calculate_spell_slots(_classes(("Wizard", 3, None)))
        system = slots.to_system()

        assert system["spell1"] == {"value": 4, "max": 4, "override": None}
        assert system["spell2"]["max"] == 2
        assert system["spell9"]["max"] == 0
        assert system["pact"]["max"] == 0
