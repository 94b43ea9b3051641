"""Deck persistence and JSON backups."""

import json
import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from slidecards_core.errors import BackupFormatError
from slidecards_core.schemas.decks import Deck
from slidecards_core.utils.logging import get_logger

logger = get_logger(__name__)

BACKUP_VERSION = 1

_decks_adapter: TypeAdapter[list[Deck]] = TypeAdapter(list[Deck])


class BackupDocument(BaseModel):
    """Serialized form of all decks of one user."""

    version: int = BACKUP_VERSION
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    user_id: str | None = Field(None, alias="userId")
    decks: list[Deck] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class DeckStore(ABC):
    """Load/save contract for a user's decks."""

    @abstractmethod
    def load_decks(self, user_id: str) -> list[Deck]:
        """Return the user's decks (empty when nothing was saved)."""

    @abstractmethod
    def save_decks(self, user_id: str, decks: list[Deck]) -> None:
        """Replace the user's saved decks."""

    def export_backup(self, user_id: str) -> str:
        """Serialize the user's decks as a backup document."""
        backup = BackupDocument(user_id=user_id, decks=self.load_decks(user_id))
        return backup.model_dump_json(by_alias=True, indent=2)

    def import_backup(self, user_id: str, blob: str | bytes) -> list[Deck]:
        """Replace the user's decks with those of a backup document.

        Args:
            user_id: User whose decks are replaced
            blob: Backup JSON

        Returns:
            The restored decks

        Raises:
            BackupFormatError: If the blob is not a backup document
        """
        try:
            raw = json.loads(blob)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Backup is not valid JSON: {e}") from e
        if not isinstance(raw, dict) or not isinstance(raw.get("decks"), list):
            raise BackupFormatError("Invalid backup file format")

        try:
            backup = BackupDocument.model_validate_json(blob)
        except ValidationError as e:
            raise BackupFormatError(f"Invalid deck data in backup: {e}") from e

        self.save_decks(user_id, backup.decks)
        logger.info(f"Restored {len(backup.decks)} decks for user {user_id}")
        return backup.decks


class JsonFileDeckStore(DeckStore):
    """Stores each user's decks as one JSON file under a data directory."""

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir).expanduser()

    def _path(self, user_id: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", user_id) or "default"
        return self.data_dir / f"decks-{safe}.json"

    def load_decks(self, user_id: str) -> list[Deck]:
        path = self._path(user_id)
        if not path.exists():
            return []
        return _decks_adapter.validate_json(path.read_bytes())

    def save_decks(self, user_id: str, decks: list[Deck]) -> None:
        path = self._path(user_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(_decks_adapter.dump_json(decks))
        tmp.replace(path)
        logger.debug(f"Saved {len(decks)} decks to {path}")
