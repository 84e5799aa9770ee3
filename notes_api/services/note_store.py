"""
Notes API - Note Store (File-Backed Persistence)
==================================================

What:  Maps note names to files under the cache directory and performs
       create / read / update / delete / list on them.
How:   One UTF-8 file per note at <cache>/<name>.txt, content = raw note text,
       no metadata. Async file I/O through aiofiles keeps the event loop free.
Who:   Called by the notes route handlers; created once by create_app().

Directory Layout:
    cache/
    ├── groceries.txt
    ├── todo.txt
    ├── .hidden          ← skipped by list_notes()
    └── _reserved.txt    ← skipped by list_notes()

Consistency Model:
    The directory is the only source of truth; nothing is indexed in memory.
    Operations on the same name run under a per-name asyncio.Lock, so an
    existence check and the write that depends on it cannot interleave with
    another request for that name. Create additionally opens the file in
    exclusive mode ("x"), which fails if the file appeared in the meantime
    (e.g. written by another process).
"""

import asyncio
import logging
import os
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Dict, List, Union

import aiofiles
import aiofiles.os

from notes_api.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    StorageFailureError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Suffix appended to every note name on disk
NOTE_SUFFIX = ".txt"

# Base-name prefixes marking hidden or reserved entries, never listed
HIDDEN_PREFIXES = (".", "_")

_FORBIDDEN_CHARACTERS = {"/", "\\", "\x00"}
_FORBIDDEN_NAMES = {".", ".."}

# NAME_MAX on common filesystems (ext4, APFS, NTFS), counted in encoded bytes
MAX_FILENAME_BYTES = 255


@dataclass(frozen=True)
class Note:
    """A named unit of text content persisted as one file."""

    name: str
    text: str


def validate_note_name(name: str) -> str:
    """
    Check that a note name is safe to use as a file base name.

    Rejects empty names, names containing a path separator or NUL, the
    relative segments "." and "..", and names whose file name would exceed
    MAX_FILENAME_BYTES. Returns the name unchanged.

    Raises:
        ValidationError describing the first rule the name breaks.
    """
    if not name:
        raise ValidationError(message="Note name must not be empty", field="name")
    if any(ch in name for ch in _FORBIDDEN_CHARACTERS):
        raise ValidationError(
            message="Note name must not contain path separators",
            field="name",
            context={"name": name},
        )
    if name in _FORBIDDEN_NAMES:
        raise ValidationError(
            message="Note name must not be a relative path segment",
            field="name",
            context={"name": name},
        )
    if len(f"{name}{NOTE_SUFFIX}".encode("utf-8")) > MAX_FILENAME_BYTES:
        raise ValidationError(
            message=f"Note name is too long (max {MAX_FILENAME_BYTES - len(NOTE_SUFFIX)} bytes)",
            field="name",
            context={"length": len(name.encode("utf-8"))},
        )
    return name


class NoteStore:
    """
    CRUD operations over note files in a single directory.

    Every public operation is a coroutine and is atomic from the caller's
    view: one existence check plus one filesystem action, performed while
    holding the lock for that note name.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self._locks: Dict[str, asyncio.Lock] = {}
        # Coroutines holding or waiting on each lock
        self._lock_users: Dict[str, int] = defaultdict(int)

    @classmethod
    def open(cls, root: Union[str, Path]) -> "NoteStore":
        """
        Create the cache directory (recursively) if needed and return a store.

        Runs synchronously: it is called once at startup, before the event
        loop serves any request.

        Raises:
            StorageFailureError if the directory cannot be created.
        """
        path = Path(root)
        if not path.exists():
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Failed to create cache directory %s: %s", path, e)
                raise StorageFailureError(
                    message=f"Failed to create cache directory: {e.strerror or e}",
                    context={"path": str(path), "os_error": str(e)},
                ) from e
            logger.info("Created cache directory: %s", path)
        elif not path.is_dir():
            raise StorageFailureError(
                message="Cache path exists but is not a directory",
                context={"path": str(path)},
            )
        return cls(path)

    # ── Path Mapping ──────────────────────────────────────────────────────

    def path_for(self, name: str) -> Path:
        """
        Map a validated note name to <root>/<name>.txt.

        Raises:
            ValidationError if the name is unsafe or would resolve outside
            the cache directory.
        """
        validate_note_name(name)
        path = self.root / f"{name}{NOTE_SUFFIX}"
        if Path(os.path.normpath(path)).parent != self.root:
            raise ValidationError(
                message="Invalid note name",
                field="name",
                context={"name": name},
            )
        return path

    @asynccontextmanager
    async def _locked(self, name: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(name, asyncio.Lock())
        self._lock_users[name] += 1
        try:
            async with lock:
                yield
        finally:
            # Drop the lock once nobody holds or awaits it
            self._lock_users[name] -= 1
            if not self._lock_users[name]:
                del self._lock_users[name]
                del self._locks[name]

    # ── Operations ────────────────────────────────────────────────────────

    async def exists(self, name: str) -> bool:
        """Whether a note file is currently present for `name`."""
        return await aiofiles.os.path.isfile(self.path_for(name))

    async def create(self, name: str, text: str) -> Note:
        """
        Create a note. Fails if a file for `name` already exists.

        Raises:
            AlreadyExistsError if present (stored content is not touched).
        """
        path = self.path_for(name)
        async with self._locked(name):
            if await aiofiles.os.path.exists(path):
                raise AlreadyExistsError(name)
            try:
                async with aiofiles.open(path, "x", encoding="utf-8", newline="") as f:
                    await f.write(text)
            except FileExistsError as e:
                raise AlreadyExistsError(name) from e
            except OSError as e:
                raise self._storage_failure("write", path, e) from e

        logger.info("Note created: %s (%d chars)", name, len(text))
        return Note(name=name, text=text)

    async def read(self, name: str) -> str:
        """
        Return the stored text for `name`.

        Raises:
            NotFoundError if absent.
        """
        path = self.path_for(name)
        async with self._locked(name):
            if not await aiofiles.os.path.isfile(path):
                raise NotFoundError(resource="note", resource_id=name)
            try:
                async with aiofiles.open(path, "r", encoding="utf-8", newline="") as f:
                    return await f.read()
            except FileNotFoundError as e:
                raise NotFoundError(resource="note", resource_id=name) from e
            except (OSError, UnicodeDecodeError) as e:
                raise self._storage_failure("read", path, e) from e

    async def update(self, name: str, text: str) -> Note:
        """
        Replace the full content of an existing note.

        Raises:
            NotFoundError if absent. Never creates a note.
        """
        path = self.path_for(name)
        async with self._locked(name):
            if not await aiofiles.os.path.isfile(path):
                raise NotFoundError(resource="note", resource_id=name)
            try:
                async with aiofiles.open(path, "w", encoding="utf-8", newline="") as f:
                    await f.write(text)
            except OSError as e:
                raise self._storage_failure("write", path, e) from e

        logger.info("Note updated: %s (%d chars)", name, len(text))
        return Note(name=name, text=text)

    async def delete(self, name: str) -> None:
        """
        Remove the note file.

        Raises:
            NotFoundError if absent (including a second delete of the same name).
        """
        path = self.path_for(name)
        async with self._locked(name):
            if not await aiofiles.os.path.isfile(path):
                raise NotFoundError(resource="note", resource_id=name)
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError as e:
                raise NotFoundError(resource="note", resource_id=name) from e
            except OSError as e:
                raise self._storage_failure("delete", path, e) from e

        logger.info("Note deleted: %s", name)

    async def list_notes(self) -> List[Note]:
        """
        Return every visible note in directory enumeration order.

        Includes each regular file (symlinks excluded) whose base name does
        not start with "." or "_". The note name is the file name without
        its last extension.

        Raises:
            StorageFailureError if the directory cannot be enumerated or a
            file cannot be read as UTF-8.
        """
        try:
            entries = await aiofiles.os.listdir(self.root)
        except OSError as e:
            raise self._storage_failure("enumerate", self.root, e) from e

        notes: List[Note] = []
        for entry in entries:
            if entry.startswith(HIDDEN_PREFIXES):
                continue
            path = self.root / entry
            if await aiofiles.os.path.islink(path) or not await aiofiles.os.path.isfile(path):
                continue
            try:
                async with aiofiles.open(path, "r", encoding="utf-8", newline="") as f:
                    text = await f.read()
            except FileNotFoundError:
                # Deleted by a concurrent request after the isfile check
                continue
            except (OSError, UnicodeDecodeError) as e:
                raise self._storage_failure("read", path, e) from e
            notes.append(Note(name=Path(entry).stem, text=text))

        logger.debug("Listed %d notes from %s", len(notes), self.root)
        return notes

    def _storage_failure(
        self, action: str, path: Path, error: Exception
    ) -> StorageFailureError:
        logger.error("Failed to %s %s: %s", action, path, error)
        return StorageFailureError(
            message=f"Failed to {action} note storage",
            context={"path": str(path), "error": str(error)},
        )
