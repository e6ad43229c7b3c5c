"""
Character module of the rules engine.

Holds the character sheet model, derived stat formulas, level progression
tables and the inventory collaborator used by combat.
"""
