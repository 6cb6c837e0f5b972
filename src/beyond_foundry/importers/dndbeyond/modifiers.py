"""
Modifier index for D&D Beyond's grouped "modifier soup".

DDB expresses every passive grant (proficiency, resistance, ability bonus,
speed, sense ...) as a loosely typed record inside ``modifiers``, grouped by
source (race, class, item, feat ...). The index flattens those groups once per
parse and buckets the records by ``(type, subType)`` and by stat id, so that
resolvers do dictionary lookups instead of rescanning every group.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger("beyond-foundry.modifiers")


class Modifier(BaseModel):
    """A single DDB modifier record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    sub_type: str = Field(default="", alias="subType")
    stat_id: int | None = Field(default=None, alias="statId")
    entity_id: int | None = Field(default=None, alias="entityId")
    value: int | float | None = None
    friendly_subtype_name: str | None = Field(default=None, alias="friendlySubtypeName")
    restriction: str | None = None
    group: str = Field(default="", description="Source group the modifier came from")

    @property
    def ability_stat_id(self) -> int | None:
        """Stat id this modifier is scoped to (statId, else entityId)."""
        return self.stat_id if self.stat_id is not None else self.entity_id

    @property
    def display_name(self) -> str:
        return self.friendly_subtype_name or self.sub_type


class ModifierIndex:
    """Lookup structure over every modifier of a character.

    Within each bucket, records keep source order (group order, then
    position inside the group); resolvers rely on it for last-write-wins
    semantics.
    """

    def __init__(self, modifiers: list[Modifier]) -> None:
        self._modifiers = modifiers
        self._by_key: dict[tuple[str, str], list[Modifier]] = defaultdict(list)
        self._by_type: dict[str, list[Modifier]] = defaultdict(list)
        self._by_stat: dict[int, list[Modifier]] = defaultdict(list)

        for mod in modifiers:
            self._by_key[(mod.type, mod.sub_type)].append(mod)
            self._by_type[mod.type].append(mod)
            stat_id = mod.ability_stat_id
            if stat_id is not None:
                self._by_stat[stat_id].append(mod)

    @classmethod
    def from_character(cls, ddb: dict) -> ModifierIndex:
        """Build an index from a DDB character's ``modifiers`` map."""
        return cls.from_groups(ddb.get("modifiers"))

    @classmethod
    def from_groups(cls, groups: Any) -> ModifierIndex:
        """Build an index from a group-name → list-of-records mapping.

        Absent or malformed groups and records are treated as empty.
        """
        flat: list[Modifier] = []
        if not isinstance(groups, dict):
            if groups is not None:
                logger.debug(f"Ignoring modifiers of type {type(groups).__name__}")
            return cls(flat)

        for group_name, records in groups.items():
            if not isinstance(records, list):
                logger.debug(f"Ignoring malformed modifier group '{group_name}'")
                continue
            for record in records:
                if not isinstance(record, dict) or not record.get("type"):
                    continue
                data = {**record, "group": str(group_name)}
                sub_type = data.get("subType")
                data["subType"] = "" if sub_type is None else str(sub_type).lower()
                try:
                    flat.append(Modifier.model_validate(data))
                except ValidationError as e:
                    logger.debug(f"Dropping malformed modifier in '{group_name}': {e.error_count()} errors")

        return cls(flat)

    def __iter__(self) -> Iterator[Modifier]:
        return iter(self._modifiers)

    def __len__(self) -> int:
        return len(self._modifiers)

    def get(self, mod_type: str, sub_type: str) -> list[Modifier]:
        """All modifiers with the given type and subType, in source order."""
        return list(self._by_key.get((mod_type, sub_type), ()))

    def of_type(self, mod_type: str) -> list[Modifier]:
        """All modifiers of a type, in source order."""
        return list(self._by_type.get(mod_type, ()))

    def for_stat(self, stat_id: int) -> list[Modifier]:
        """All modifiers scoped to an ability stat id."""
        return list(self._by_stat.get(stat_id, ()))

    def total(self, mod_type: str, sub_type: str) -> int:
        """Sum of the numeric values of matching modifiers."""
        return int(sum(m.value or 0 for m in self._by_key.get((mod_type, sub_type), ())))

    def last_value(self, mod_type: str, sub_type: str) -> int | None:
        """Value of the last matching modifier that carries one."""
        for mod in reversed(self._by_key.get((mod_type, sub_type), ())):
            if mod.value is not None:
                return int(mod.value)
        return None
