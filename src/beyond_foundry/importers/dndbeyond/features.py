"""
Feature and trait aggregation plus language detection.

Class features, subclass features, racial traits, feats, the background
feature and optional class features all become Foundry ``feat`` items tagged
with where they came from.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from .schema import (
    DEFAULT_FEATURE_IMG,
    FEATURE_BACKGROUND,
    FEATURE_CLASS,
    FEATURE_FEAT,
    FEATURE_FOUNDRY_TYPE,
    FEATURE_OPTIONAL_CLASS,
    FEATURE_RACIAL,
    FEATURE_SUBCLASS,
    HTML_TAG_PATTERN,
    LANGUAGE_KEYWORDS,
    MODULE_FLAG,
)

logger = logging.getLogger("beyond-foundry.features")

_LANGUAGE_PATTERNS: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"\b{re.escape(name)}\b") for name in LANGUAGE_KEYWORDS
}

# "deep-speech" / "thieves-cant" style slugs used by language modifiers
_LANGUAGE_SLUGS: dict[str, str] = {
    name.lower().replace("'", "").replace(" ", "-"): key for name, key in LANGUAGE_KEYWORDS.items()
}


def build_feature_item(
    definition: dict,
    category: str,
    requirements: str = "",
    ddb_id: Any = None,
) -> dict[str, Any]:
    """Foundry feat item for one feature definition."""
    flags = {
        "ddbId": ddb_id if ddb_id is not None else definition.get("id"),
        "definitionId": definition.get("id"),
        "category": category,
        "isHomebrew": bool(definition.get("isHomebrew")),
    }
    if definition.get("requiredLevel") is not None:
        flags["requiredLevel"] = definition.get("requiredLevel")

    return {
        "name": definition.get("name") or "Unknown Feature",
        "type": "feat",
        "img": definition.get("avatarUrl") or DEFAULT_FEATURE_IMG,
        "system": {
            "description": {
                "value": definition.get("description") or "",
                "chat": definition.get("snippet") or "",
                "unidentified": "",
            },
            "type": {"value": FEATURE_FOUNDRY_TYPE[category], "subtype": ""},
            "requirements": requirements,
        },
        "effects": [],
        "flags": {MODULE_FLAG: flags},
    }


def _definitions(entries: Any) -> list[dict]:
    """Feature definitions from a list of ``{definition}`` wrappers or bare definitions."""
    result: list[dict] = []
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        definition = entry.get("definition") if "definition" in entry else entry
        if isinstance(definition, dict) and definition.get("name"):
            result.append(definition)
    return result


def _level_gated(definitions: list[dict], level: int, seen: set) -> list[dict]:
    """Definitions whose requiredLevel is at most ``level``, deduplicated by (id, name)."""
    gated = []
    for definition in definitions:
        required = definition.get("requiredLevel")
        if isinstance(required, int) and required > level:
            continue
        key = (definition.get("id"), definition.get("name"))
        if key in seen:
            continue
        seen.add(key)
        gated.append(definition)
    return gated


def map_class_features(ddb: dict) -> list[dict[str, Any]]:
    """Class and subclass features available at each class's current level.

    DDB also lists subclass features under ``classFeatures``; those carry the
    subclass id as ``classId`` and are tagged as subclass features.
    """
    items: list[dict[str, Any]] = []
    seen: set = set()

    for entry in ddb.get("classes") or []:
        if not isinstance(entry, dict):
            continue
        class_def = entry.get("definition") if isinstance(entry.get("definition"), dict) else {}
        subclass = entry.get("subclassDefinition") if isinstance(entry.get("subclassDefinition"), dict) else {}
        level = entry.get("level") if isinstance(entry.get("level"), int) else 1
        class_name = class_def.get("name") or ""
        subclass_name = subclass.get("name") or class_name
        subclass_id = subclass.get("id")

        features = entry.get("classFeatures")
        if features is None:
            features = class_def.get("classFeatures")
        for definition in _level_gated(_definitions(features), level, seen):
            if subclass_id is not None and definition.get("classId") == subclass_id:
                items.append(build_feature_item(definition, FEATURE_SUBCLASS, subclass_name))
                continue
            requirement = f"{class_name} {definition.get('requiredLevel') or 1}".strip()
            items.append(build_feature_item(definition, FEATURE_CLASS, requirement))

        sub_features = _definitions(subclass.get("classFeatures"))
        for definition in _level_gated(sub_features, level, seen):
            items.append(build_feature_item(definition, FEATURE_SUBCLASS, subclass_name))

    return items


def map_racial_traits(ddb: dict) -> list[dict[str, Any]]:
    race = ddb.get("race") if isinstance(ddb.get("race"), dict) else {}
    race_name = race.get("fullName") or race.get("baseName") or ""
    return [
        build_feature_item(definition, FEATURE_RACIAL, race_name)
        for definition in _definitions(race.get("racialTraits"))
    ]


def map_feats(ddb: dict) -> list[dict[str, Any]]:
    return [build_feature_item(definition, FEATURE_FEAT) for definition in _definitions(ddb.get("feats"))]


def map_background_feature(ddb: dict) -> list[dict[str, Any]]:
    """The background's single named feature, if any."""
    background = ddb.get("background") if isinstance(ddb.get("background"), dict) else {}
    definition = background.get("definition")
    if background.get("hasCustomBackground") and isinstance(background.get("customBackground"), dict):
        definition = background["customBackground"]
    if not isinstance(definition, dict) or not definition.get("featureName"):
        return []

    feature = {
        "id": definition.get("id"),
        "name": definition["featureName"],
        "description": definition.get("featureDescription") or "",
        "isHomebrew": definition.get("isHomebrew"),
    }
    return [build_feature_item(feature, FEATURE_BACKGROUND, definition.get("name") or "")]


def map_optional_class_features(ddb: dict) -> list[dict[str, Any]]:
    """Optional class features that carry their own definition."""
    items = []
    for entry in ddb.get("optionalClassFeatures") or []:
        if not isinstance(entry, dict) or not isinstance(entry.get("definition"), dict):
            continue
        definition = entry["definition"]
        if definition.get("name"):
            items.append(build_feature_item(definition, FEATURE_OPTIONAL_CLASS, ddb_id=entry.get("classFeatureId")))
    return items


def map_features(ddb: dict) -> tuple[list[dict[str, Any]], list[str]]:
    """Aggregate every feature source into one list of feat items.

    Returns:
        Tuple of (feat items, warnings). A source that fails to map is
        skipped with a warning.
    """
    warnings: list[str] = []
    items: list[dict[str, Any]] = []

    for label, mapper in (
        ("class features", map_class_features),
        ("racial traits", map_racial_traits),
        ("feats", map_feats),
        ("background feature", map_background_feature),
        ("optional class features", map_optional_class_features),
    ):
        try:
            items.extend(mapper(ddb))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            warnings.append(f"Error parsing {label}: {e}")

    logger.debug(f"🎯 Parsed {len(items)} features")
    return items, warnings


def extract_languages(texts: list[str]) -> list[str]:
    """Language keys mentioned in free text.

    HTML is stripped and names are matched case-sensitively on word
    boundaries, so "common" the adjective does not count as Common.
    """
    found: list[str] = []
    for text in texts:
        plain = HTML_TAG_PATTERN.sub(" ", text or "")
        for name, pattern in _LANGUAGE_PATTERNS.items():
            key = LANGUAGE_KEYWORDS[name]
            if key not in found and pattern.search(plain):
                found.append(key)
    return found


def racial_trait_texts(ddb: dict) -> list[str]:
    race = ddb.get("race") if isinstance(ddb.get("race"), dict) else {}
    texts = []
    for definition in _definitions(race.get("racialTraits")):
        texts.append(definition.get("description") or "")
        texts.append(definition.get("snippet") or "")
    return texts


def resolve_languages(structured: list[str], ddb: dict) -> dict[str, Any]:
    """Foundry language block from language modifiers plus racial-trait text.

    Args:
        structured: Display names (or slugs) from ``language`` modifiers.
        ddb: Raw D&D Beyond character JSON, for racial-trait descriptions.

    Returns:
        ``{"value": [keys], "custom": "unmapped; names"}``.
    """
    keys: list[str] = []
    custom: list[str] = []

    for name in structured:
        key = LANGUAGE_KEYWORDS.get(name) or _LANGUAGE_SLUGS.get(name.lower().replace("'", "").replace(" ", "-"))
        if key:
            if key not in keys:
                keys.append(key)
        elif name not in custom:
            custom.append(name)

    for key in extract_languages(racial_trait_texts(ddb)):
        if key not in keys:
            keys.append(key)

    return {"value": keys, "custom": "; ".join(custom)}
