from __future__ import annotations

import json
import logging
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..errors import ConfigurationNotFound, StorageError, ValidationCode, ValidationError
from ..roster import Participant, Role

logger = logging.getLogger(__name__)

STORAGE_KEY = "savedTeams"


@dataclass(frozen=True)
class Configuration:
    id: str
    name: str
    participants: tuple[Participant, ...] = field(default_factory=tuple)
    roles: tuple[Role, ...] = field(default_factory=tuple)
    # Display string only; never parsed back into a date.
    saved_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "teamMembers": [p.to_dict() for p in self.participants],
            "roles": [r.to_dict() for r in self.roles],
            "date": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Configuration":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            participants=tuple(Participant.from_dict(p) for p in data.get("teamMembers", [])),
            roles=tuple(Role.from_dict(r) for r in data.get("roles", [])),
            saved_at=str(data.get("date", "")),
        )


# ---------------------------------------------------------------------------
# Blob stores
#
# The configuration list is a single JSON document under one key. Any object
# with get/put works; the three below cover the database, a file on disk and
# tests.
# ---------------------------------------------------------------------------


class BlobStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class MemoryBlobStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def put(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlBlobStore:
    """Blob store on the ``blob_entries`` table. Needs an app context."""

    def get(self, key: str) -> str | None:
        from ..models import BlobEntry
        return BlobEntry.read(key)

    def put(self, key: str, value: str) -> None:
        from ..extensions import db
        from ..models import BlobEntry

        try:
            BlobEntry.write(key, value)
        except SQLAlchemyError:
            db.session.rollback()
            raise


class JsonFileBlobStore:
    """All keys in one JSON object on disk, rewritten atomically on put."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def put(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp, self.path)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


def _today() -> str:
    return date.today().strftime("%x")


class ConfigurationStore:
    """
    Saved (participants, roles) snapshots, oldest first.

    The list is read from the blob store on first access and written back in
    full after every save/delete.
    """

    def __init__(self, blob_store: BlobStore, key: str = STORAGE_KEY):
        self.blob_store = blob_store
        self.key = key
        self._configurations: list[Configuration] | None = None
        # guards the read-modify-flush cycle; requests share one store
        self._lock = threading.RLock()

    def _ensure_loaded(self) -> list[Configuration]:
        with self._lock:
            if self._configurations is None:
                self._configurations = self._read()
            return self._configurations

    def _read(self) -> list[Configuration]:
        try:
            raw = self.blob_store.get(self.key)
        except (SQLAlchemyError, OSError, ValueError):
            logger.exception("Could not read saved configurations; starting empty")
            return []
        if not raw:
            return []

        try:
            records = json.loads(raw)
            return [Configuration.from_dict(record) for record in records]
        except (ValueError, KeyError, TypeError):
            logger.exception("Saved configurations under %r are unreadable; starting empty", self.key)
            return []

    def _flush(self, updated: list[Configuration]) -> None:
        payload = json.dumps([c.to_dict() for c in updated])
        try:
            self.blob_store.put(self.key, payload)
        except (SQLAlchemyError, OSError, ValueError) as e:
            logger.exception("Failed to persist saved configurations")
            raise StorageError("Could not save team configurations.") from e
        self._configurations = updated

    def reload(self) -> None:
        with self._lock:
            self._configurations = None

    def list(self) -> list[Configuration]:
        return list(self._ensure_loaded())

    def get(self, configuration_id: str) -> Configuration | None:
        for configuration in self._ensure_loaded():
            if configuration.id == configuration_id:
                return configuration
        return None

    def save(self, name: str, participants: Sequence[Participant], roles: Sequence[Role]) -> Configuration:
        name = (name or "").strip()
        if not name:
            raise ValidationError(ValidationCode.EMPTY_NAME, "Please enter a name for this team configuration.")
        if not participants or not roles:
            raise ValidationError(ValidationCode.EMPTY_CONFIGURATION)

        configuration = Configuration(
            id=uuid.uuid4().hex,
            name=name,
            participants=tuple(participants),
            roles=tuple(roles),
            saved_at=_today(),
        )
        with self._lock:
            self._flush(self._ensure_loaded() + [configuration])
        logger.info(
            "Saved configuration %r (%d members, %d roles)",
            name, len(configuration.participants), len(configuration.roles),
        )
        return configuration

    def load(self, configuration_id: str) -> tuple[list[Participant], list[Role]]:
        configuration = self.get(configuration_id)
        if configuration is None:
            raise ConfigurationNotFound(configuration_id)
        logger.info("Loaded configuration %r", configuration.name)
        return list(configuration.participants), list(configuration.roles)

    def delete(self, configuration_id: str) -> None:
        with self._lock:
            remaining = [c for c in self._ensure_loaded() if c.id != configuration_id]
            self._flush(remaining)
        logger.info("Deleted configuration %s", configuration_id)
