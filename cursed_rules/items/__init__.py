"""
Items module of the rules engine.

Weapon catalog, cursed tool grades and the readers that extract damage,
durability and critical data from an item.
"""
