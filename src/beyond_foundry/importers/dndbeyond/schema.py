"""
D&D Beyond JSON schema constants and lookup tables.

These map DDB's internal IDs, enum codes and slugs to Foundry VTT dnd5e keys.
Based on community reverse-engineering of the v5 character-service endpoint.
All tables are read-only and shared by every parse.
"""

import re

# ---------------------------------------------------------------------------
# Relay endpoint / URL parsing
# ---------------------------------------------------------------------------

RELAY_CHARACTER_PATH = "/proxy/character/{character_id}"

# Matches: https://www.dndbeyond.com/characters/12345678[/anything]
DDB_CHARACTER_URL_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?dndbeyond\.com/characters/(\d+)"
)

PARSING_VERSION = "3.1.0"
MODULE_FLAG = "beyond-foundry"

DEFAULT_ACTOR_IMG = "icons/svg/mystery-man.svg"

# ---------------------------------------------------------------------------
# Abilities
# ---------------------------------------------------------------------------

STAT_ID_MAP: dict[int, str] = {
    1: "str",
    2: "dex",
    3: "con",
    4: "int",
    5: "wis",
    6: "cha",
}

ABILITY_KEYS: tuple[str, ...] = tuple(STAT_ID_MAP.values())

ABILITY_NAME_TO_KEY: dict[str, str] = {
    "strength": "str",
    "dexterity": "dex",
    "constitution": "con",
    "intelligence": "int",
    "wisdom": "wis",
    "charisma": "cha",
}

MIN_ABILITY_SCORE = 1
MAX_ABILITY_SCORE = 30
DEFAULT_ABILITY_SCORE = 10

# ---------------------------------------------------------------------------
# Modifier types and subtypes
# ---------------------------------------------------------------------------

MODIFIER_TYPE_BONUS = "bonus"
MODIFIER_TYPE_SET = "set"  # e.g. Headband of Intellect
MODIFIER_TYPE_SET_BASE = "set-base"
MODIFIER_TYPE_PROFICIENCY = "proficiency"
MODIFIER_TYPE_EXPERTISE = "expertise"
MODIFIER_TYPE_LANGUAGE = "language"
MODIFIER_TYPE_RESISTANCE = "resistance"
MODIFIER_TYPE_IMMUNITY = "immunity"
MODIFIER_TYPE_VULNERABILITY = "vulnerability"

# "<ability>-score" subtypes carry their ability in the slug; the generic
# "ability-score" subtype needs the statId.
ABILITY_SCORE_SUBTYPES: dict[str, str] = {
    f"{name}-score": key for name, key in ABILITY_NAME_TO_KEY.items()
}
GENERIC_ABILITY_SCORE_SUBTYPE = "ability-score"

SAVING_THROW_SUBTYPES: dict[str, str] = {
    f"{name}-saving-throws": key for name, key in ABILITY_NAME_TO_KEY.items()
}
GENERIC_SAVING_THROW_SUBTYPE = "saving-throws"

ARMOR_CLASS_SUBTYPE = "armor-class"

# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

# DDB slug → Foundry skill key. Perception and persuasion share their first
# three letters, so keys are listed explicitly instead of derived.
SKILL_SUBTYPES: dict[str, str] = {
    "acrobatics": "acr",
    "animal-handling": "ani",
    "arcana": "arc",
    "athletics": "ath",
    "deception": "dec",
    "history": "his",
    "insight": "ins",
    "intimidation": "itm",
    "investigation": "inv",
    "medicine": "med",
    "nature": "nat",
    "perception": "prc",
    "performance": "prf",
    "persuasion": "per",
    "religion": "rel",
    "sleight-of-hand": "slt",
    "stealth": "ste",
    "survival": "sur",
}

SKILL_ABILITIES: dict[str, str] = {
    "acr": "dex",
    "ani": "wis",
    "arc": "int",
    "ath": "str",
    "dec": "cha",
    "his": "int",
    "ins": "wis",
    "itm": "cha",
    "inv": "int",
    "med": "wis",
    "nat": "int",
    "prc": "wis",
    "prf": "cha",
    "per": "cha",
    "rel": "int",
    "slt": "dex",
    "ste": "dex",
    "sur": "wis",
}

# ---------------------------------------------------------------------------
# Weapon / armor / tool proficiencies
# ---------------------------------------------------------------------------

WEAPON_CATEGORY_SUBTYPES: dict[str, str] = {
    "simple-weapons": "sim",
    "martial-weapons": "mar",
}

ARMOR_CATEGORY_SUBTYPES: dict[str, str] = {
    "light-armor": "lgt",
    "medium-armor": "med",
    "heavy-armor": "hvy",
    "shields": "shl",
}

# Individual weapons granted by race or class (e.g. elven weapon training).
SPECIFIC_WEAPON_SUBTYPES: frozenset[str] = frozenset({
    "battleaxe", "blowgun", "club", "dagger", "dart", "flail", "glaive",
    "greataxe", "greatclub", "greatsword", "halberd", "hand-crossbow",
    "handaxe", "heavy-crossbow", "javelin", "lance", "light-crossbow",
    "light-hammer", "longbow", "longsword", "mace", "maul", "morningstar",
    "net", "pike", "quarterstaff", "rapier", "scimitar", "shortbow",
    "shortsword", "sickle", "sling", "spear", "trident", "war-pick",
    "warhammer", "whip", "crossbow-light", "crossbow-hand", "crossbow-heavy",
})

TOOL_SUBTYPE_SUFFIXES: tuple[str, ...] = (
    "-tools", "-kit", "-supplies", "-set", "-utensils", "-instrument",
)

TOOL_SUBTYPES: frozenset[str] = frozenset({
    "bagpipes", "drum", "dulcimer", "flute", "lute", "lyre", "horn",
    "pan-flute", "shawm", "viol", "vehicles-land", "vehicles-water",
    "navigators-tools", "thieves-tools", "disguise-kit", "forgery-kit",
    "herbalism-kit", "poisoners-kit", "dice-set", "playing-card-set",
    "dragonchess-set", "three-dragon-ante-set", "musical-instrument",
})

# ---------------------------------------------------------------------------
# Damage types and conditions (resistances / immunities)
# ---------------------------------------------------------------------------

DAMAGE_TYPES: frozenset[str] = frozenset({
    "acid", "bludgeoning", "cold", "fire", "force", "lightning", "necrotic",
    "piercing", "poison", "psychic", "radiant", "slashing", "thunder",
})

CONDITION_TYPES: frozenset[str] = frozenset({
    "blinded", "charmed", "deafened", "diseased", "exhaustion", "frightened",
    "grappled", "incapacitated", "invisible", "paralyzed", "petrified",
    "poisoned", "prone", "restrained", "stunned", "unconscious",
})

# ---------------------------------------------------------------------------
# Movement and senses
# ---------------------------------------------------------------------------

DEFAULT_WALK_SPEED = 30

SPEED_SUBTYPES: dict[str, str] = {
    "speed": "walk",
    "innate-speed-walking": "walk",
    "speed-walking": "walk",
    "innate-speed-flying": "fly",
    "speed-flying": "fly",
    "innate-speed-swimming": "swim",
    "speed-swimming": "swim",
    "innate-speed-climbing": "climb",
    "speed-climbing": "climb",
    "innate-speed-burrowing": "burrow",
    "speed-burrowing": "burrow",
}

# race.weightSpeeds.normal keys → Foundry movement keys
RACE_SPEED_KEYS: dict[str, str] = {
    "walk": "walk",
    "fly": "fly",
    "swim": "swim",
    "climb": "climb",
    "burrow": "burrow",
}

SENSE_SUBTYPES: dict[str, str] = {
    "darkvision": "darkvision",
    "blindsight": "blindsight",
    "tremorsense": "tremorsense",
    "truesight": "truesight",
}

SIZE_MAP: dict[str, str] = {
    "tiny": "tiny",
    "small": "sm",
    "medium": "med",
    "large": "lg",
    "huge": "huge",
    "gargantuan": "grg",
}

SIZE_ID_MAP: dict[int, str] = {
    2: "tiny",
    3: "sm",
    4: "med",
    5: "lg",
    6: "huge",
    7: "grg",
}

# ---------------------------------------------------------------------------
# Identity details
# ---------------------------------------------------------------------------

ALIGNMENT_MAP: dict[int, str] = {
    1: "lg",
    2: "ng",
    3: "cg",
    4: "ln",
    5: "n",
    6: "cn",
    7: "le",
    8: "ne",
    9: "ce",
}

# XP needed to *reach* each level (index 0 → level 1)
XP_THRESHOLDS: tuple[int, ...] = (
    0, 300, 900, 2700, 6500, 14000, 23000, 34000, 48000, 64000,
    85000, 100000, 120000, 140000, 165000, 195000, 225000, 265000, 305000, 355000,
)

CURRENCY_KEYS: tuple[str, ...] = ("pp", "gp", "ep", "sp", "cp")

# ---------------------------------------------------------------------------
# Classes and spellcasting
# ---------------------------------------------------------------------------

CLASS_HIT_DICE: dict[str, str] = {
    "barbarian": "d12",
    "bard": "d8",
    "cleric": "d8",
    "druid": "d8",
    "fighter": "d10",
    "monk": "d8",
    "paladin": "d10",
    "ranger": "d10",
    "rogue": "d8",
    "sorcerer": "d6",
    "warlock": "d8",
    "wizard": "d6",
    "artificer": "d8",
    "blood hunter": "d10",
}

# Lower-cased class (or caster subclass) name → spellcasting ability key
CLASS_SPELLCASTING_ABILITY: dict[str, str] = {
    "artificer": "int",
    "bard": "cha",
    "cleric": "wis",
    "druid": "wis",
    "paladin": "cha",
    "ranger": "wis",
    "sorcerer": "cha",
    "warlock": "cha",
    "wizard": "int",
    "eldritch knight": "int",
    "arcane trickster": "int",
}

PROGRESSION_FULL = "full"
PROGRESSION_HALF = "half"
PROGRESSION_ARTIFICER = "artificer"
PROGRESSION_THIRD = "third"
PROGRESSION_PACT = "pact"

CLASS_PROGRESSION: dict[str, str] = {
    "bard": PROGRESSION_FULL,
    "cleric": PROGRESSION_FULL,
    "druid": PROGRESSION_FULL,
    "sorcerer": PROGRESSION_FULL,
    "wizard": PROGRESSION_FULL,
    "paladin": PROGRESSION_HALF,
    "ranger": PROGRESSION_HALF,
    "artificer": PROGRESSION_ARTIFICER,
    "warlock": PROGRESSION_PACT,
}

# Caster subclasses of otherwise non-casting classes
SUBCLASS_PROGRESSION: dict[str, str] = {
    "eldritch knight": PROGRESSION_THIRD,
    "arcane trickster": PROGRESSION_THIRD,
}

# Class level → slots per spell level (1st, 2nd, ...). PHB tables.
FULL_CASTER_SLOTS: dict[int, tuple[int, ...]] = {
    1: (2,),
    2: (3,),
    3: (4, 2),
    4: (4, 3),
    5: (4, 3, 2),
    6: (4, 3, 3),
    7: (4, 3, 3, 1),
    8: (4, 3, 3, 2),
    9: (4, 3, 3, 3, 1),
    10: (4, 3, 3, 3, 2),
    11: (4, 3, 3, 3, 2, 1),
    12: (4, 3, 3, 3, 2, 1),
    13: (4, 3, 3, 3, 2, 1, 1),
    14: (4, 3, 3, 3, 2, 1, 1),
    15: (4, 3, 3, 3, 2, 1, 1, 1),
    16: (4, 3, 3, 3, 2, 1, 1, 1),
    17: (4, 3, 3, 3, 2, 1, 1, 1, 1),
    18: (4, 3, 3, 3, 3, 1, 1, 1, 1),
    19: (4, 3, 3, 3, 3, 2, 1, 1, 1),
    20: (4, 3, 3, 3, 3, 2, 2, 1, 1),
}

HALF_CASTER_SLOTS: dict[int, tuple[int, ...]] = {
    1: (),
    2: (2,),
    3: (3,),
    4: (3,),
    5: (4, 2),
    6: (4, 2),
    7: (4, 3),
    8: (4, 3),
    9: (4, 3, 2),
    10: (4, 3, 2),
    11: (4, 3, 3),
    12: (4, 3, 3),
    13: (4, 3, 3, 1),
    14: (4, 3, 3, 1),
    15: (4, 3, 3, 2),
    16: (4, 3, 3, 2),
    17: (4, 3, 3, 3, 1),
    18: (4, 3, 3, 3, 1),
    19: (4, 3, 3, 3, 2),
    20: (4, 3, 3, 3, 2),
}

THIRD_CASTER_SLOTS: dict[int, tuple[int, ...]] = {
    1: (),
    2: (),
    3: (2,),
    4: (3,),
    5: (3,),
    6: (3,),
    7: (4, 2),
    8: (4, 2),
    9: (4, 2),
    10: (4, 3),
    11: (4, 3),
    12: (4, 3),
    13: (4, 3, 2),
    14: (4, 3, 2),
    15: (4, 3, 2),
    16: (4, 3, 3),
    17: (4, 3, 3),
    18: (4, 3, 3),
    19: (4, 3, 3, 1),
    20: (4, 3, 3, 1),
}

# Warlock level → (number of pact slots, pact slot level)
PACT_MAGIC_SLOTS: dict[int, tuple[int, int]] = {
    1: (1, 1),
    2: (2, 1),
    3: (2, 2),
    4: (2, 2),
    5: (2, 3),
    6: (2, 3),
    7: (2, 4),
    8: (2, 4),
    9: (2, 5),
    10: (2, 5),
    11: (3, 5),
    12: (3, 5),
    13: (3, 5),
    14: (3, 5),
    15: (3, 5),
    16: (3, 5),
    17: (4, 5),
    18: (4, 5),
    19: (4, 5),
    20: (4, 5),
}

MAX_SPELL_LEVEL = 9

# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

ITEM_TYPE_WEAPON = "weapon"
ITEM_TYPE_EQUIPMENT = "equipment"
ITEM_TYPE_CONSUMABLE = "consumable"
ITEM_TYPE_TOOL = "tool"
ITEM_TYPE_CONTAINER = "container"
ITEM_TYPE_LOOT = "loot"

# DDB filterType / type label (lower-cased) → Foundry item type
ITEM_FILTER_TYPE_MAP: dict[str, str] = {
    "weapon": ITEM_TYPE_WEAPON,
    "staff": ITEM_TYPE_WEAPON,
    "armor": ITEM_TYPE_EQUIPMENT,
    "shield": ITEM_TYPE_EQUIPMENT,
    "ring": ITEM_TYPE_EQUIPMENT,
    "rod": ITEM_TYPE_EQUIPMENT,
    "wand": ITEM_TYPE_EQUIPMENT,
    "wondrous item": ITEM_TYPE_EQUIPMENT,
    "potion": ITEM_TYPE_CONSUMABLE,
    "scroll": ITEM_TYPE_CONSUMABLE,
    "ammunition": ITEM_TYPE_CONSUMABLE,
    "tool": ITEM_TYPE_TOOL,
    "tools": ITEM_TYPE_TOOL,
    "container": ITEM_TYPE_CONTAINER,
    "adventuring gear": ITEM_TYPE_LOOT,
    "other gear": ITEM_TYPE_LOOT,
    "gear": ITEM_TYPE_LOOT,
    "mount": ITEM_TYPE_LOOT,
    "vehicle": ITEM_TYPE_LOOT,
}

# Gear whose DDB type/subType names one of these is really a tool
TOOL_KEYWORDS: tuple[str, ...] = ("tool", "kit", "instrument", "supplies", "gaming set")

CONSUMABLE_TYPE_MAP: dict[str, str] = {
    "potion": "potion",
    "scroll": "scroll",
    "ammunition": "ammo",
    "wand": "wand",
}

DEFAULT_WEAPON_DAMAGE = ("1d6", "slashing")
DEFAULT_ARMOR_CLASS_BONUS = 2

# armorTypeId → (Foundry armor type, dex cap). None cap = full dex.
ARMOR_TYPE_MAP: dict[int, tuple[str, int | None]] = {
    1: ("light", None),
    2: ("medium", 2),
    3: ("heavy", 0),
    4: ("shield", 0),
}

STEALTH_DISADVANTAGE = 2

WEAPON_PROPERTY_MAP: dict[str, str] = {
    "ammunition": "amm",
    "finesse": "fin",
    "heavy": "hvy",
    "light": "lgt",
    "loading": "lod",
    "reach": "rch",
    "special": "spc",
    "thrown": "thr",
    "two-handed": "two",
    "versatile": "ver",
}

# attackType: 1 melee, 2 ranged
WEAPON_ATTACK_TYPE_MAP: dict[int, str] = {1: "M", 2: "R"}
# categoryId: 1 simple, 2 martial
WEAPON_CATEGORY_MAP: dict[int, str] = {1: "simple", 2: "martial"}

RARITY_MAP: dict[str, str] = {
    "common": "common",
    "uncommon": "uncommon",
    "rare": "rare",
    "very rare": "veryRare",
    "legendary": "legendary",
    "artifact": "artifact",
}

DEFAULT_ITEM_ICONS: dict[str, str] = {
    ITEM_TYPE_WEAPON: "icons/weapons/swords/sword-broad-silver.webp",
    ITEM_TYPE_EQUIPMENT: "icons/equipment/chest/breastplate-scale-grey.webp",
    ITEM_TYPE_CONSUMABLE: "icons/consumables/potions/bottle-round-corked-red.webp",
    ITEM_TYPE_TOOL: "icons/tools/hand/hammer-cobbler-steel.webp",
    ITEM_TYPE_CONTAINER: "icons/containers/bags/pack-leather-brown.webp",
    ITEM_TYPE_LOOT: "icons/svg/item-bag.svg",
}

# ---------------------------------------------------------------------------
# Spells
# ---------------------------------------------------------------------------

ACTIVATION_TYPE_MAP: dict[int, str] = {
    1: "action",
    2: "bonus",
    3: "reaction",
    4: "minute",
    5: "hour",
    6: "minute",  # "special", usually a long casting time
    7: "day",
}
DEFAULT_ACTIVATION = "action"

DURATION_UNIT_MAP: dict[str, str] = {
    "Instantaneous": "inst",
    "Round": "round",
    "Minute": "minute",
    "Hour": "hour",
    "Day": "day",
    "Week": "week",
    "Month": "month",
    "Year": "year",
    "Permanent": "perm",
    "Special": "spec",
    "Time": "minute",
    "Concentration": "minute",
    "Until Dispelled": "perm",
    "Until Dispelled or Triggered": "perm",
}
DEFAULT_DURATION_UNIT = "inst"

RANGE_UNIT_MAP: dict[str, str] = {
    "Self": "self",
    "Touch": "touch",
    "Ranged": "ft",
    "Sight": "spec",
    "Unlimited": "any",
}

TARGET_TYPE_MAP: dict[str, str] = {
    "Self": "self",
    "Touch": "touch",
    "Ranged": "creature",
    "Point": "space",
    "Line": "line",
    "Cone": "cone",
    "Cube": "cube",
    "Cylinder": "cylinder",
    "Sphere": "sphere",
    "Square": "square",
    "Emanation": "radius",
}
DEFAULT_TARGET_TYPE = "creature"

SPELL_SCHOOL_MAP: dict[str, str] = {
    "abjuration": "abj",
    "conjuration": "con",
    "divination": "div",
    "enchantment": "enc",
    "evocation": "evo",
    "illusion": "ill",
    "necromancy": "nec",
    "transmutation": "trs",
}
DEFAULT_SPELL_SCHOOL = "evo"

# Spell attackType: 1 melee spell attack, 2 ranged spell attack
SPELL_ATTACK_TYPE_MAP: dict[int, str] = {1: "msak", 2: "rsak"}

# Numeric spell component codes used by some exports
SPELL_COMPONENT_CODES: dict[int, str] = {1: "vocal", 2: "somatic", 3: "material"}

LIMITED_USE_RESET_MAP: dict[int, str] = {
    1: "sr",
    2: "lr",
    3: "day",
    4: "charges",
}

# Spell source categories whose spells do not use the caster's slots
INNATE_SPELL_SOURCES: frozenset[str] = frozenset({"race", "feat", "item", "background"})

DICE_PATTERN = re.compile(r"\d+d\d+")
DISTANCE_PATTERN = re.compile(r"(\d+)\s*-?\s*(feet|foot|ft\.?|miles?)", re.IGNORECASE)
MATERIAL_COST_PATTERN = re.compile(r"(\d[\d,]*)\s*gp", re.IGNORECASE)
COMPONENT_TOKEN_PATTERN = re.compile(r"\b([VSM])\b")

DEFAULT_SPELL_IMG = "icons/magic/symbols/rune-sigil-black-pink.webp"

# ---------------------------------------------------------------------------
# Features and languages
# ---------------------------------------------------------------------------

FEATURE_CLASS = "class-feature"
FEATURE_SUBCLASS = "subclass-feature"
FEATURE_RACIAL = "racial-trait"
FEATURE_BACKGROUND = "background-feature"
FEATURE_FEAT = "feat"
FEATURE_OPTIONAL_CLASS = "optional-class-feature"

# Provenance category → Foundry feat type.value
FEATURE_FOUNDRY_TYPE: dict[str, str] = {
    FEATURE_CLASS: "class",
    FEATURE_SUBCLASS: "class",
    FEATURE_OPTIONAL_CLASS: "class",
    FEATURE_RACIAL: "race",
    FEATURE_BACKGROUND: "background",
    FEATURE_FEAT: "feat",
}

DEFAULT_FEATURE_IMG = "icons/svg/book.svg"

# Language display name → Foundry language key. Matched case-sensitively
# against trait text so that "common" the adjective is not picked up.
LANGUAGE_KEYWORDS: dict[str, str] = {
    "Common": "common",
    "Dwarvish": "dwarvish",
    "Elvish": "elvish",
    "Giant": "giant",
    "Gnomish": "gnomish",
    "Goblin": "goblin",
    "Halfling": "halfling",
    "Orc": "orc",
    "Abyssal": "abyssal",
    "Celestial": "celestial",
    "Draconic": "draconic",
    "Deep Speech": "deep",
    "Infernal": "infernal",
    "Primordial": "primordial",
    "Sylvan": "sylvan",
    "Undercommon": "undercommon",
    "Druidic": "druidic",
    "Thieves' Cant": "cant",
    "Aquan": "aquan",
    "Auran": "auran",
    "Ignan": "ignan",
    "Terran": "terran",
    "Gith": "gith",
}

HTML_TAG_PATTERN = re.compile(r"<[^>]+>")
