"""
Manual vow override storage.

The engine only defines how an override merges with the automatic bonus;
where it lives is up to the host. Two stores are provided: an in-memory one
and one writing a small JSON file per character.
"""

import json
import re
from pathlib import Path
from typing import Protocol

from catchery import log_warning
from pydantic import BaseModel, Field, ValidationError

from cursed_rules.effects.vow_bonus import BonusPercent

STORAGE_PREFIX = "jjk_bonus_overrides_"


class VowOverride(BaseModel):
    """A stored manual override and whether it is switched on."""

    active: bool = Field(default=False, description="Whether the override applies.")
    values: BonusPercent = Field(
        default_factory=BonusPercent,
        description="The override percentages.",
    )


class VowOverrideStore(Protocol):
    """Persistence contract for manual overrides, keyed per character."""

    def load(self, character_id: str) -> VowOverride | None: ...

    def save(self, character_id: str, active: bool, values: BonusPercent) -> None: ...

    def clear(self, character_id: str) -> None: ...


class InMemoryOverrideStore:
    """Keeps overrides in a dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._overrides: dict[str, VowOverride] = {}

    def load(self, character_id: str) -> VowOverride | None:
        override = self._overrides.get(STORAGE_PREFIX + character_id)
        return override.model_copy(deep=True) if override else None

    def save(self, character_id: str, active: bool, values: BonusPercent) -> None:
        self._overrides[STORAGE_PREFIX + character_id] = VowOverride(
            active=active,
            values=values.model_copy(),
        )

    def clear(self, character_id: str) -> None:
        self._overrides.pop(STORAGE_PREFIX + character_id, None)


_UNSAFE_ID = re.compile(r"[\\/]|\.\.|\x00")


class JsonFileOverrideStore:
    """
    Stores each override as `<prefix><character id>.json` in a directory.

    Ids holding path separators or ".." are rejected with ValueError.

    Attributes:
        directory (Path):
            Where the override files are written; created on first save.

    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, character_id: str) -> Path:
        # Ids become file names, so they must not leave the directory.
        if not character_id or _UNSAFE_ID.search(character_id):
            raise ValueError(f"Invalid character id for an override file: {character_id!r}")
        return self.directory / f"{STORAGE_PREFIX}{character_id}.json"

    def load(self, character_id: str) -> VowOverride | None:
        """
        Reads the override of a character.

        Args:
            character_id (str): The character id.

        Returns:
            VowOverride | None: The override with clamped values, or None when
                the file is missing or unreadable.

        """
        path = self._path(character_id)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return VowOverride.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            log_warning(
                "Ignoring unreadable vow override",
                {"path": str(path), "error": str(e)},
            )
            return None

    def save(self, character_id: str, active: bool, values: BonusPercent) -> None:
        """Writes the override of a character, replacing any previous one."""
        path = self._path(character_id)
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = VowOverride(active=active, values=values)
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload.model_dump(), f, indent=2)

    def clear(self, character_id: str) -> None:
        """Deletes the override of a character, if any."""
        self._path(character_id).unlink(missing_ok=True)
