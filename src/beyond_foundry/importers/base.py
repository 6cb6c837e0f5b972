"""
Base models and exceptions for the character import system.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CharacterParseError(Exception):
    """Raised when a character cannot be converted at all.

    Provides a user-facing message explaining what went wrong
    and, where possible, how to fix it.
    """


class InvalidCharacterError(CharacterParseError):
    """The source record is not a character (not an object, or no identity)."""


class FetchError(CharacterParseError):
    """Obtaining the source JSON from a file or the relay failed."""


class ParseWarning(BaseModel):
    """A warning generated during parsing."""

    field: str = Field(description="Section that triggered the warning")
    message: str = Field(description="Human-readable warning message")
    suggestion: str = Field(default="", description="Actionable suggestion to resolve the warning")


class ParseReport(BaseModel):
    """Structured parse report with status, item counts and warnings."""

    status: str = Field(description='Parse status: "success" or "success_with_warnings"')
    character_name: str = Field(description="Name of the parsed character")
    item_counts: dict[str, int] = Field(
        default_factory=dict,
        description="Number of generated items per Foundry item type",
    )
    warnings: list[ParseWarning] = Field(
        default_factory=list,
        description="Non-fatal issues encountered during parsing",
    )
    suggestions: list[str] = Field(
        default_factory=list,
        description="Actionable advice for improving the import",
    )

    def format(self) -> str:
        """Format the report as a readable text block.

        Returns:
            Multi-line formatted string.
        """
        lines: list[str] = []

        lines.append(f"D&D Beyond Parse Report - {self.character_name}")
        status_display = self.status.upper().replace("_", " ")
        lines.append(f"Status: {status_display}")
        lines.append("")

        if self.item_counts:
            total = sum(self.item_counts.values())
            lines.append(f"Items ({total}):")
            for item_type, count in sorted(self.item_counts.items()):
                lines.append(f"  {item_type}: {count}")
            lines.append("")

        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}):")
            for w in self.warnings:
                line = f"  - [{w.field}] {w.message}"
                if w.suggestion:
                    line += f" ({w.suggestion})"
                lines.append(line)
            lines.append("")

        if self.suggestions:
            lines.append("Suggestions:")
            for s in self.suggestions:
                lines.append(f"  - {s}")
            lines.append("")

        return "\n".join(lines).rstrip()


class ParseResult(BaseModel):
    """Result of a character parse: the actor plus everything that degraded."""

    actor: dict[str, Any] = Field(description="The Foundry VTT actor data")
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-fatal issues encountered during parsing (unknown enums, missing fields, ...)",
    )
    source_id: int | None = Field(
        default=None,
        description="Original character ID on D&D Beyond",
    )

    def build_report(self) -> ParseReport:
        """Build a structured ParseReport from this ParseResult."""
        counts: dict[str, int] = {}
        for item in self.actor.get("items", []):
            item_type = item.get("type", "unknown")
            counts[item_type] = counts.get(item_type, 0) + 1

        structured = [_parse_warning(w) for w in self.warnings]

        return ParseReport(
            status="success_with_warnings" if self.warnings else "success",
            character_name=self.actor.get("name", "Unknown Character"),
            item_counts=counts,
            warnings=structured,
            suggestions=_generate_suggestions(self.actor, self.warnings),
        )


def _parse_warning(warning_text: str) -> ParseWarning:
    """Parse a raw warning string into a structured ParseWarning.

    Args:
        warning_text: The raw warning message string.

    Returns:
        ParseWarning with field, message, and optional suggestion.
    """
    field = "general"
    suggestion = ""

    lower = warning_text.lower()

    if "weapon" in lower and "default" in lower:
        field = "items"
        suggestion = "Check the weapon's damage on the Foundry sheet"
    elif "inventory" in lower or "item" in lower:
        field = "items"
        suggestion = "Re-export character or manually add missing items"
    elif "spell" in lower:
        field = "spells"
        suggestion = "Verify spell list on D&D Beyond"
    elif "class" in lower:
        field = "classes"
        suggestion = "Verify character class on D&D Beyond"
    elif "stat" in lower or "ability" in lower:
        field = "abilities"
    elif "feature" in lower or "trait" in lower or "feat" in lower:
        field = "features"
    elif "homebrew" in lower:
        field = "homebrew"
        suggestion = "Homebrew content imported as custom; verify manually"

    return ParseWarning(field=field, message=warning_text, suggestion=suggestion)


def _generate_suggestions(actor: dict[str, Any], warnings: list[str]) -> list[str]:
    """Generate actionable suggestions from the parsed actor and warnings."""
    suggestions: list[str] = []
    system = actor.get("system", {})

    items = actor.get("items", [])
    has_spells = any(i.get("type") == "spell" for i in items)
    spells = system.get("spells", {})
    total_slots = sum(
        v.get("max", 0) for k, v in spells.items() if k.startswith("spell")
    ) + spells.get("pact", {}).get("max", 0)
    if has_spells and not total_slots:
        suggestions.append(
            "Spells were imported but no spell slots were derived; "
            "set slot overrides on the Foundry sheet if the class is homebrew"
        )

    if any("default" in w.lower() and "damage" in w.lower() for w in warnings):
        suggestions.append(
            "Some weapons use placeholder damage (1d6 slashing); edit them after import"
        )

    languages = system.get("traits", {}).get("languages", {}).get("value", [])
    if not languages:
        suggestions.append("No languages detected; add them on the Foundry sheet")

    return suggestions
