"""
Inventory → Foundry item mapping.

Every inventory entry with a definition becomes exactly one Foundry item;
unknown categories fall back to ``loot`` so nothing the player owns is lost.
"""

from __future__ import annotations

import logging
from typing import Any

from .schema import (
    ARMOR_TYPE_MAP,
    CONSUMABLE_TYPE_MAP,
    DEFAULT_ARMOR_CLASS_BONUS,
    DEFAULT_ITEM_ICONS,
    DEFAULT_WEAPON_DAMAGE,
    ITEM_FILTER_TYPE_MAP,
    ITEM_TYPE_CONSUMABLE,
    ITEM_TYPE_CONTAINER,
    ITEM_TYPE_EQUIPMENT,
    ITEM_TYPE_LOOT,
    ITEM_TYPE_TOOL,
    ITEM_TYPE_WEAPON,
    LIMITED_USE_RESET_MAP,
    MODULE_FLAG,
    RARITY_MAP,
    STEALTH_DISADVANTAGE,
    TOOL_KEYWORDS,
    WEAPON_ATTACK_TYPE_MAP,
    WEAPON_CATEGORY_MAP,
    WEAPON_PROPERTY_MAP,
)

logger = logging.getLogger("beyond-foundry.items")


def _number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return value


def classify_item(definition: dict) -> tuple[str, bool]:
    """Foundry item type for a DDB item definition.

    Returns:
        Tuple of (item_type, recognized). ``recognized`` is False when the
        category label was unknown and the ``loot`` fallback was used.
    """
    if definition.get("isContainer"):
        return ITEM_TYPE_CONTAINER, True

    label = definition.get("filterType") or definition.get("type") or ""
    item_type = ITEM_FILTER_TYPE_MAP.get(str(label).strip().lower())
    recognized = item_type is not None
    if item_type is None:
        # Fall back on the finer-grained type label before giving up
        item_type = ITEM_FILTER_TYPE_MAP.get(str(definition.get("type") or "").strip().lower())
        recognized = item_type is not None
        item_type = item_type or ITEM_TYPE_LOOT

    if item_type == ITEM_TYPE_LOOT:
        descriptor = f"{definition.get('type') or ''} {definition.get('subType') or ''}".lower()
        if any(keyword in descriptor for keyword in TOOL_KEYWORDS):
            return ITEM_TYPE_TOOL, True

    return item_type, recognized


def parse_price(definition: dict) -> float:
    """Item price in gold pieces (DDB cost is either a number or ``{quantity}``)."""
    cost = definition.get("cost")
    if isinstance(cost, dict):
        cost = cost.get("quantity")
    return _number(cost, 0)


def parse_attunement(ddb_item: dict, definition: dict) -> tuple[str, bool]:
    """Return (Foundry attunement requirement, attuned state).

    Attunement applies only when the definition supports it *and* carries a
    non-empty attunement description.
    """
    supports = bool(definition.get("canAttune") or definition.get("requiresAttunement"))
    description = (definition.get("attunementDescription") or "").strip()
    if not (supports and description):
        return "", False
    return "required", bool(ddb_item.get("isAttuned"))


def _base_system(ddb_item: dict, definition: dict) -> dict[str, Any]:
    attunement, attuned = parse_attunement(ddb_item, definition)
    rarity = str(definition.get("rarity") or "").lower()
    quantity = ddb_item.get("quantity")
    return {
        "description": {
            "value": definition.get("description") or "",
            "chat": definition.get("snippet") or "",
            "unidentified": "",
        },
        "quantity": int(quantity) if isinstance(quantity, int) and quantity > 0 else 1,
        "weight": _number(definition.get("weight"), 0),
        "price": {"value": parse_price(definition), "denomination": "gp"},
        "equipped": bool(ddb_item.get("equipped")),
        "rarity": RARITY_MAP.get(rarity, "common"),
        "identified": True,
        "attunement": attunement,
        "attuned": attuned,
    }


def _magic_bonus(definition: dict) -> int:
    total = 0
    for mod in definition.get("grantedModifiers") or []:
        if isinstance(mod, dict) and mod.get("type") == "bonus" and mod.get("subType") == "magic":
            total += int(_number(mod.get("value"), 0))
    return total


def _dice_formula(dice: dict) -> str | None:
    """Formula for a DDB dice block, falling back to ``diceString``."""
    count = dice.get("diceCount")
    value = dice.get("diceValue")
    if not count or not value:
        return str(dice["diceString"]) if dice.get("diceString") else None
    formula = f"{count}d{value}"
    fixed = dice.get("fixedValue")
    if fixed:
        formula += f" + {fixed}"
    return formula


def parse_weapon_damage(definition: dict) -> tuple[dict[str, Any], bool]:
    """Damage parts and versatile formula for a weapon.

    Returns:
        Tuple of (damage block, defaulted). ``defaulted`` is True when no
        dice were present and the 1d6 slashing placeholder was used.
    """
    dice = definition.get("damage")
    formula = _dice_formula(dice) if isinstance(dice, dict) else None
    damage_type = str(definition.get("damageType") or "").lower()

    defaulted = formula is None
    if defaulted:
        formula, damage_type = DEFAULT_WEAPON_DAMAGE
    elif not damage_type:
        damage_type = DEFAULT_WEAPON_DAMAGE[1]

    versatile = ""
    for prop in definition.get("properties") or []:
        if isinstance(prop, dict) and str(prop.get("name", "")).lower() == "versatile":
            versatile = str(prop.get("notes") or "")

    return {"parts": [[formula, damage_type]], "versatile": versatile}, defaulted


def _weapon_properties(definition: dict) -> list[str]:
    props: list[str] = []
    for prop in definition.get("properties") or []:
        if not isinstance(prop, dict):
            continue
        key = WEAPON_PROPERTY_MAP.get(str(prop.get("name", "")).lower())
        if key and key not in props:
            props.append(key)
    if _magic_bonus(definition) or definition.get("magic"):
        props.append("mgc")
    return props


def _weapon_system(definition: dict) -> tuple[dict[str, Any], bool]:
    damage, defaulted = parse_weapon_damage(definition)

    attack = WEAPON_ATTACK_TYPE_MAP.get(definition.get("attackType"), "M")
    category = WEAPON_CATEGORY_MAP.get(definition.get("categoryId"), "simple")

    normal = _number(definition.get("range"), 0)
    long_range = _number(definition.get("longRange"), 0)
    range_block = {
        "value": int(normal) if normal else 5,
        "long": int(long_range) if long_range and long_range > normal else None,
        "units": "ft",
    }

    return {
        "type": {"value": f"{category}{attack}", "baseItem": ""},
        "properties": _weapon_properties(definition),
        "damage": damage,
        "range": range_block,
        "actionType": "mwak" if attack == "M" else "rwak",
        "magicalBonus": _magic_bonus(definition) or None,
    }, defaulted


def _is_armor(definition: dict) -> bool:
    label = str(definition.get("filterType") or definition.get("type") or "").lower()
    return definition.get("armorTypeId") in ARMOR_TYPE_MAP or label in ("armor", "shield")


def _armor_system(definition: dict, warnings: list[str]) -> dict[str, Any]:
    name = definition.get("name") or "Unknown Item"
    armor_type, dex_cap = ARMOR_TYPE_MAP.get(definition.get("armorTypeId"), ("light", None))

    armor_class = definition.get("armorClass")
    if not isinstance(armor_class, int) or isinstance(armor_class, bool):
        warnings.append(f"Armor '{name}' has no armorClass, defaulting to +{DEFAULT_ARMOR_CLASS_BONUS}")
        armor_class = DEFAULT_ARMOR_CLASS_BONUS

    strength = definition.get("strengthRequirement")
    properties = []
    if definition.get("stealthCheck") == STEALTH_DISADVANTAGE:
        properties.append("stealthDisadvantage")
    if _magic_bonus(definition) or definition.get("magic"):
        properties.append("mgc")

    return {
        "type": {"value": armor_type, "baseItem": ""},
        "armor": {
            "value": armor_class,
            "dex": dex_cap,
            "magicalBonus": _magic_bonus(definition) or None,
        },
        "strength": strength if isinstance(strength, int) and strength > 0 else None,
        "properties": properties,
    }


def _uses(definition: dict) -> dict[str, Any]:
    limited = definition.get("limitedUse")
    if isinstance(limited, dict) and isinstance(limited.get("maxUses"), int):
        max_uses = limited["maxUses"]
        used = limited.get("numberUsed") if isinstance(limited.get("numberUsed"), int) else 0
        return {
            "value": max(0, max_uses - used),
            "max": str(max_uses),
            "per": LIMITED_USE_RESET_MAP.get(limited.get("resetType")),
            "autoDestroy": False,
        }
    return {"value": None, "max": "", "per": None, "autoDestroy": True}


def _item_image(definition: dict, item_type: str) -> str:
    return (
        definition.get("avatarUrl")
        or definition.get("largeAvatarUrl")
        or DEFAULT_ITEM_ICONS.get(item_type, DEFAULT_ITEM_ICONS[ITEM_TYPE_LOOT])
    )


def map_inventory_item(ddb_item: dict) -> tuple[dict[str, Any] | None, list[str]]:
    """Map one DDB inventory entry.

    Args:
        ddb_item: An element of the character's ``inventory`` array.

    Returns:
        Tuple of (Foundry item dict or None when skipped, warnings).
    """
    warnings: list[str] = []
    definition = ddb_item.get("definition") if isinstance(ddb_item, dict) else None
    if not isinstance(definition, dict):
        item_id = ddb_item.get("id") if isinstance(ddb_item, dict) else None
        warnings.append(f"Inventory item {item_id} has no definition, skipped")
        return None, warnings

    name = definition.get("name") or "Unknown Item"
    item_type, recognized = classify_item(definition)
    if not recognized:
        label = definition.get("filterType") or definition.get("type")
        warnings.append(f"Unknown item category '{label}' for '{name}', imported as loot")

    system = _base_system(ddb_item, definition)
    flags: dict[str, Any] = {
        "ddbId": ddb_item.get("id"),
        "definitionId": definition.get("id"),
        "entityTypeId": definition.get("entityTypeId"),
        "ddbType": definition.get("type"),
        "filterType": definition.get("filterType"),
        "isHomebrew": bool(definition.get("isHomebrew")),
        "containerEntityId": ddb_item.get("containerEntityId"),
    }

    if item_type == ITEM_TYPE_WEAPON:
        weapon, defaulted = _weapon_system(definition)
        system.update(weapon)
        flags["damageDefaulted"] = defaulted
        if defaulted:
            warnings.append(f"Weapon '{name}' has no damage data, defaulting to 1d6 slashing")
    elif item_type == ITEM_TYPE_EQUIPMENT:
        if _is_armor(definition):
            system.update(_armor_system(definition, warnings))
        else:
            system["type"] = {"value": "trinket", "baseItem": ""}
    elif item_type == ITEM_TYPE_CONSUMABLE:
        label = str(definition.get("filterType") or definition.get("type") or "").lower()
        system["type"] = {"value": CONSUMABLE_TYPE_MAP.get(label, "trinket"), "subtype": ""}
        system["uses"] = _uses(definition)
    elif item_type == ITEM_TYPE_TOOL:
        system["type"] = {"value": "", "baseItem": ""}
        system["ability"] = "int"
        system["proficient"] = 0
    elif item_type == ITEM_TYPE_CONTAINER:
        system["capacity"] = {
            "type": "weight",
            "value": _number(definition.get("capacityWeight"), 0),
        }
        system["currency"] = {"pp": 0, "gp": 0, "ep": 0, "sp": 0, "cp": 0}

    foundry_item = {
        "name": name,
        "type": item_type,
        "img": _item_image(definition, item_type),
        "system": system,
        "effects": [],
        "flags": {MODULE_FLAG: flags},
    }
    return foundry_item, warnings


def parse_inventory_item(ddb_item: dict) -> dict[str, Any] | None:
    """Convert one DDB inventory entry into a Foundry item.

    Usable on its own for incremental updates. Warnings are logged.

    Returns:
        Foundry item dict, or None if the entry has no definition.
    """
    item, warnings = map_inventory_item(ddb_item)
    for warning in warnings:
        logger.warning(f"⚠️ {warning}")
    return item


def map_inventory(ddb: dict) -> tuple[list[dict[str, Any]], list[str]]:
    """Map the whole inventory. Entries that fail to map are skipped."""
    warnings: list[str] = []
    items: list[dict[str, Any]] = []

    inventory = ddb.get("inventory")
    if not isinstance(inventory, list):
        if inventory is not None:
            warnings.append("Malformed inventory, no items imported")
        return items, warnings

    for entry in inventory:
        try:
            item, item_warnings = map_inventory_item(entry)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            warnings.append(f"Inventory item parsing error: {e}")
            continue
        warnings.extend(item_warnings)
        if item is not None:
            items.append(item)

    logger.debug(f"⚔️ Parsed {len(items)} equipment items")
    return items, warnings
