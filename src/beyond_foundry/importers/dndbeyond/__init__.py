"""
D&D Beyond character resolution.

The resolvers in this package turn DDB's character JSON into a Foundry VTT
dnd5e actor: modifiers → abilities → proficiencies → attributes → skills →
spell slots, then equipment, spells and features.
"""
