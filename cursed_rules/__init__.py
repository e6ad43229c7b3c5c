"""
Rules-resolution engine for the cursed energy tabletop ruleset.

This package contains the pure computations behind the character manager:
dice rolling, free-text effect parsing, binding vow bonuses, level
progression and combat resolution.
"""
