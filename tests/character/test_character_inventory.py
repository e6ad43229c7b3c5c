"""
Tests for the inventory collaborator over a character sheet.
"""

import pytest

from cursed_rules.character.character_inventory import CharacterInventory


def test_get_item(fighter, katana):
    inventory = CharacterInventory(fighter)
    assert inventory.get_item("w-katana") is katana
    assert inventory.get_item("missing") is None


def test_list_weapons_skips_broken_and_non_weapons(fighter):
    """Test that only usable weapons are offered for attacks."""
    weapons = CharacterInventory(fighter).list_weapons()
    assert [item.id for item in weapons] == ["w-katana"]


def test_set_broken_updates_the_sheet(fighter):
    inventory = CharacterInventory(fighter)
    inventory.set_broken("w-katana", True)
    assert fighter.inventory[0].is_broken is True
    assert inventory.list_weapons() == []

    inventory.set_broken("w-knife", False)
    assert [item.id for item in inventory.list_weapons()] == ["w-knife"]


def test_set_broken_unknown_item(fighter):
    with pytest.raises(KeyError):
        CharacterInventory(fighter).set_broken("missing", True)
