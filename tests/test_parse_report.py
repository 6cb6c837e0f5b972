"""Tests for ParseResult and the structured parse report."""

import pytest

from beyond_foundry.importers.base import (
    ParseReport,
    ParseResult,
    ParseWarning,
    _generate_suggestions,
    _parse_warning,
)
from beyond_foundry.importers.dndbeyond.mapper import parse_character_result


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def minimal_actor():
    """A tiny actor with one spell, no slots and one language."""
    return {
        "name": "Pip",
        "type": "character",
        "system": {
            "spells": {"spell1": {"value": 0, "max": 0}, "pact": {"value": 0, "max": 0}},
            "traits": {"languages": {"value": ["common"], "custom": ""}},
        },
        "items": [
            {"type": "spell", "name": "Light"},
            {"type": "weapon", "name": "Dagger"},
            {"type": "weapon", "name": "Sling"},
        ],
    }


# ============================================================================
# Models
# ============================================================================

class TestParseReportModels:
    """Test the report models and formatting."""

    def test_parse_warning_default_suggestion(self):
        warning = ParseWarning(field="items", message="Something odd")
        assert warning.suggestion == ""

    def test_format_header(self):
        report = ParseReport(status="success", character_name="Pip")
        text = report.format()

        assert text.startswith("D&D Beyond Parse Report - Pip")
        assert "Status: SUCCESS" in text

    def test_format_status_with_warnings(self):
        report = ParseReport(status="success_with_warnings", character_name="Pip")
        assert "Status: SUCCESS WITH WARNINGS" in report.format()

    def test_format_items_and_warnings(self):
        report = ParseReport(
            status="success_with_warnings",
            character_name="Pip",
            item_counts={"weapon": 2, "spell": 1},
            warnings=[ParseWarning(field="spells", message="Spell 7 has no definition, skipped",
                                   suggestion="Verify spell list on D&D Beyond")],
            suggestions=["Add languages"],
        )
        text = report.format()

        assert "Items (3):" in text
        assert "  spell: 1" in text
        assert "Warnings (1):" in text
        assert "[spells] Spell 7 has no definition, skipped (Verify spell list on D&D Beyond)" in text
        assert "Suggestions:" in text

    def test_format_empty_sections_omitted(self):
        text = ParseReport(status="success", character_name="Pip").format()

        assert "Items" not in text
        assert "Warnings" not in text
        assert "Suggestions" not in text


# ============================================================================
# Warning categorisation and suggestions
# ============================================================================

class TestParseWarning:
    """Test raw warning string categorisation."""

    @pytest.mark.parametrize("text,field", [
        ("Weapon 'Club' has no damage data, defaulting to 1d6 slashing", "items"),
        ("Inventory item 9010 has no definition, skipped", "items"),
        ("Spell 7102 has no definition, skipped", "spells"),
        ("Malformed classes list, treating character as classless", "classes"),
        ("Ignoring malformed stats: expected a list", "abilities"),
        ("Error parsing racial traits: boom", "features"),
        ("Unknown alignmentId 42, alignment left blank", "general"),
    ])
    def test_fields(self, text, field):
        assert _parse_warning(text).field == field

    def test_message_preserved(self):
        assert _parse_warning("anything").message == "anything"


class TestSuggestions:
    """Test actionable suggestions."""

    def test_spells_without_slots(self, minimal_actor):
        suggestions = _generate_suggestions(minimal_actor, [])
        assert any("no spell slots" in s for s in suggestions)

    def test_placeholder_damage(self, minimal_actor):
        suggestions = _generate_suggestions(
            minimal_actor, ["Weapon 'Club' has no damage data, defaulting to 1d6 slashing"]
        )
        assert any("placeholder damage" in s for s in suggestions)

    def test_missing_languages(self, minimal_actor):
        minimal_actor["system"]["traits"]["languages"]["value"] = []
        suggestions = _generate_suggestions(minimal_actor, [])
        assert any("No languages" in s for s in suggestions)

    def test_no_suggestions_for_clean_actor(self, minimal_actor):
        minimal_actor["items"] = [i for i in minimal_actor["items"] if i["type"] != "spell"]
        assert _generate_suggestions(minimal_actor, []) == []


# ============================================================================
# build_report
# ============================================================================

class TestBuildReport:
    """Test ParseResult.build_report."""

    def test_build_report_success(self, minimal_actor):
        report = ParseResult(actor=minimal_actor).build_report()

        assert report.status == "success"
        assert report.character_name == "Pip"
        assert report.item_counts == {"spell": 1, "weapon": 2}

    def test_build_report_with_warnings(self, minimal_actor):
        result = ParseResult(actor=minimal_actor, warnings=["Spell 9 has no definition, skipped"])
        report = result.build_report()

        assert report.status == "success_with_warnings"
        assert report.warnings[0].field == "spells"

    def test_build_report_sample_character(self, ddb_sample):
        report = parse_character_result(ddb_sample).build_report()

        assert report.status == "success_with_warnings"
        assert report.character_name == "Seren Ashvale"
        assert report.item_counts["spell"] == 5
        assert report.item_counts["feat"] == 11
        assert sum(report.item_counts.values()) == 25
        assert len(report.warnings) == 3
        assert "Seren Ashvale" in report.format()

    def test_build_report_druid_is_clean(self, ddb_druid):
        report = parse_character_result(ddb_druid).build_report()

        assert report.status == "success"
        assert report.warnings == []
