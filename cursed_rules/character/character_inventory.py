"""
Character inventory module for the rules engine.

Defines the inventory collaborator the combat resolver talks to, and the
default implementation backed by the items of a Character snapshot.
"""

from typing import Protocol

from cursed_rules.character.main import Character, Item
from cursed_rules.core.logging import log_debug
from cursed_rules.items.weapon import is_weapon


class InventoryCollaborator(Protocol):
    """What the resolver needs from whoever owns the inventory."""

    def get_item(self, item_id: str) -> Item | None: ...

    def set_broken(self, item_id: str, broken: bool) -> None: ...

    def list_weapons(self) -> list[Item]: ...


class CharacterInventory:
    """
    Inventory collaborator over the items of a character sheet.

    Attributes:
        owner (Character):
            The character whose inventory list is read and updated in place.

    """

    def __init__(self, owner: Character) -> None:
        self.owner = owner

    def get_item(self, item_id: str) -> Item | None:
        """
        Returns the item with the given id.

        Args:
            item_id (str): The id of the item.

        Returns:
            Item | None: The item, or None if the character does not carry it.

        """
        for item in self.owner.inventory:
            if item.id == item_id:
                return item
        return None

    def set_broken(self, item_id: str, broken: bool) -> None:
        """
        Marks an item as broken (or repaired).

        Args:
            item_id (str): The id of the item.
            broken (bool): The new broken flag.

        """
        item = self.get_item(item_id)
        if item is None:
            raise KeyError(f"No item '{item_id}' in the inventory of {self.owner.name}")
        item.is_broken = broken
        log_debug(
            "Item durability flag updated",
            {"character": self.owner.name, "item": item.name, "broken": broken},
        )

    def list_weapons(self) -> list[Item]:
        """
        Returns the usable weapons of the character.

        Returns:
            list[Item]: Unbroken items recognised as weapons, by catalog name
                or by a "Dano: XdY" tag.

        """
        return [
            item
            for item in self.owner.inventory
            if not item.is_broken and is_weapon(item)
        ]
