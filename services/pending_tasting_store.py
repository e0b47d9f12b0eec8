"""
Local storage for tasting edits that wait on a wine job.

The pending list lives in a single named slot and is always read and
written as a whole. The reconciler only sees the store interface, so
tests hand it the in-memory version.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union
import structlog
from pydantic import ValidationError as PydanticValidationError

from models.tasting import PendingTastingEdit
from exceptions import PendingStoreCorruptError

logger = structlog.get_logger(__name__)

DEFAULT_SLOT_KEY = "pendingTastings"


class PendingTastingStore:
    """Interface for the pending-edit slot."""

    def load(self) -> list[PendingTastingEdit]:
        raise NotImplementedError

    def save(self, edits: list[PendingTastingEdit]) -> None:
        """Replace the whole list. An empty list clears the slot."""
        raise NotImplementedError


class InMemoryPendingTastingStore(PendingTastingStore):
    """Process-local store."""

    def __init__(self, edits: Optional[list[PendingTastingEdit]] = None):
        self._edits: list[PendingTastingEdit] = [e.model_copy() for e in edits or []]

    def load(self) -> list[PendingTastingEdit]:
        return [e.model_copy() for e in self._edits]

    def save(self, edits: list[PendingTastingEdit]) -> None:
        self._edits = [e.model_copy() for e in edits]


class JsonFilePendingTastingStore(PendingTastingStore):
    """
    Store backed by a JSON document of named slots.

    Other slots in the same file (e.g. a stored invite code) are left
    untouched when the pending list is written.
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_SLOT_KEY):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> dict:
        if not self.path.exists():
            return {}

        try:
            document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(
                "pending_store_read_failed",
                path=str(self.path),
                error=str(e)
            )
            raise PendingStoreCorruptError(str(self.path), str(e)) from e

        if not isinstance(document, dict):
            raise PendingStoreCorruptError(str(self.path), "top level is not an object")

        return document

    def _write_document(self, document: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def load(self) -> list[PendingTastingEdit]:
        document = self._read_document()
        raw = document.get(self.key) or []

        if not isinstance(raw, list):
            raise PendingStoreCorruptError(str(self.path), f"slot {self.key} is not a list")

        edits = []
        for index, item in enumerate(raw):
            try:
                edits.append(PendingTastingEdit.model_validate(item))
            except PydanticValidationError as e:
                # Only rows without a usable job id end up here
                logger.warning(
                    "pending_tasting_row_skipped",
                    path=str(self.path),
                    index=index,
                    error=str(e)
                )

        return edits

    def save(self, edits: list[PendingTastingEdit]) -> None:
        document = self._read_document()

        if edits:
            document[self.key] = [e.model_dump(mode="json") for e in edits]
        else:
            document.pop(self.key, None)

        self._write_document(document)

        logger.debug(
            "pending_store_saved",
            path=str(self.path),
            count=len(edits)
        )
