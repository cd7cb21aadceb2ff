"""Slot-based persistence for narrative saves, partitioned by story."""
from __future__ import annotations

import json
import logging
import secrets
import time
from typing import Any, Callable, Dict, List

from bardo.data.storage import KeyValueStorage
from bardo.domain.defs import DEFAULT_MAX_SAVES
from bardo.domain.saves import SaveData, SaveRecord, SystemsSnapshot
from bardo.services.errors import SaveLoadError

logger = logging.getLogger(__name__)

STORAGE_KEY = "bardo_saves"
AUTOSAVE_NAME = "⚡ Autosave"
AUTOSAVE_ID_PREFIX = "autosave_"


class SaveService:
    """
    Reads and writes the shared save collection for one active story.

    All stories share a single ``{"saves": [...]}`` document; every query and
    mutation only sees records whose ``storyId`` matches the active story.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        story_id: str,
        *,
        max_saves: int = DEFAULT_MAX_SAVES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._story_id = story_id
        self._max_saves = max_saves
        self._clock = clock

    @property
    def story_id(self) -> str:
        return self._story_id

    @property
    def autosave_id(self) -> str:
        return f"{AUTOSAVE_ID_PREFIX}{self._story_id}"

    def saves(self) -> List[SaveRecord]:
        """Return this story's records, newest first."""
        records = [record for record in self._read_all() if record.story_id == self._story_id]
        return sorted(records, key=lambda record: record.timestamp, reverse=True)

    @property
    def has_any_save(self) -> bool:
        return any(not record.is_autosave for record in self.saves())

    @property
    def has_continue(self) -> bool:
        return bool(self.saves())

    def save(
        self,
        name: str,
        interpreter_blob: str,
        text: str,
        snapshot: SystemsSnapshot,
        overwrite_id: str | None = None,
    ) -> str:
        """Write a manual save and return its id."""
        records = self._read_all()
        timestamp = self._now_ms()
        if overwrite_id is not None:
            for index, existing in enumerate(records):
                if existing.id == overwrite_id and existing.story_id == self._story_id:
                    records[index] = SaveRecord(
                        id=overwrite_id,
                        story_id=self._story_id,
                        name=name,
                        timestamp=timestamp,
                        interpreter_blob=interpreter_blob,
                        text=text,
                        systems_snapshot=snapshot,
                        is_autosave=existing.is_autosave,
                    )
                    self._write_all(records)
                    logger.info("Save overwritten: %s", overwrite_id)
                    return overwrite_id
            logger.warning("No save '%s' to overwrite; creating a new one.", overwrite_id)

        record = SaveRecord(
            id=f"save_{timestamp}_{secrets.token_hex(3)}",
            story_id=self._story_id,
            name=name,
            timestamp=timestamp,
            interpreter_blob=interpreter_blob,
            text=text,
            systems_snapshot=snapshot,
        )
        records.insert(0, record)
        self._write_all(self._evict(records))
        logger.info("Save written: %s (%s)", record.id, name)
        return record.id

    def autosave(self, interpreter_blob: str, text: str, snapshot: SystemsSnapshot) -> str:
        """Replace the story's single autosave record."""
        record = SaveRecord(
            id=self.autosave_id,
            story_id=self._story_id,
            name=AUTOSAVE_NAME,
            timestamp=self._now_ms(),
            interpreter_blob=interpreter_blob,
            text=text,
            systems_snapshot=snapshot,
            is_autosave=True,
        )
        records = [existing for existing in self._read_all() if existing.id != record.id]
        records.insert(0, record)
        self._write_all(records)
        logger.debug("Autosave written for '%s'.", self._story_id)
        return record.id

    def load(self, save_id: str) -> SaveData | None:
        for record in self._read_all():
            if record.id == save_id and record.story_id == self._story_id:
                return record.data
        logger.warning("Save '%s' not found for story '%s'.", save_id, self._story_id)
        return None

    def most_recent(self) -> SaveRecord | None:
        """Return the record with the highest timestamp; ties go to collection order."""
        latest: SaveRecord | None = None
        for record in self._read_all():
            if record.story_id != self._story_id:
                continue
            if latest is None or record.timestamp > latest.timestamp:
                latest = record
        return latest

    def load_most_recent(self) -> SaveData | None:
        record = self.most_recent()
        return record.data if record is not None else None

    def delete(self, save_id: str) -> bool:
        records = self._read_all()
        kept = [record for record in records if not (record.id == save_id and record.story_id == self._story_id)]
        if len(kept) == len(records):
            return False
        self._write_all(kept)
        logger.info("Save deleted: %s", save_id)
        return True

    def clear_all(self) -> None:
        """Delete every record of the active story, leaving other stories untouched."""
        kept = [record for record in self._read_all() if record.story_id != self._story_id]
        self._write_all(kept)
        logger.info("All saves cleared for '%s'.", self._story_id)

    def _evict(self, records: List[SaveRecord]) -> List[SaveRecord]:
        manual = [record for record in records if record.story_id == self._story_id and not record.is_autosave]
        if len(manual) <= self._max_saves:
            return records
        newest_first = sorted(manual, key=lambda record: record.timestamp, reverse=True)
        evicted = {id(record) for record in newest_first[self._max_saves:]}
        for record in newest_first[self._max_saves:]:
            logger.info("Evicting oldest save: %s", record.id)
        return [record for record in records if id(record) not in evicted]

    def _read_all(self) -> List[SaveRecord]:
        try:
            raw = self._storage.read(STORAGE_KEY)
        except UnicodeDecodeError:
            logger.warning("Save storage is not valid UTF-8; treating it as empty.")
            return []
        except OSError as exc:
            logger.warning("Unable to read saves: %s", exc)
            return []
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt save storage; treating it as empty.")
            return []
        entries = payload.get("saves") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            logger.warning("Save storage has no 'saves' list; treating it as empty.")
            return []
        records: List[SaveRecord] = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            record = SaveRecord.from_payload(entry)
            if record is not None:
                records.append(record)
        return records

    def _write_all(self, records: List[SaveRecord]) -> None:
        payload: Dict[str, Any] = {"saves": [record.to_payload() for record in records]}
        try:
            self._storage.write(STORAGE_KEY, json.dumps(payload, ensure_ascii=False))
        except OSError as exc:
            raise SaveLoadError(f"Unable to write saves: {exc}") from exc

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)
