"""Filesystem storage for raw uploads and derived renditions."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Mapping

from fastapi import UploadFile

from ..config import MediaPaths, ensure_media_paths
from ..exceptions import (
    AssetNotFoundError,
    InvalidIdentifierError,
    PayloadTooLargeError,
    SourceNotFoundError,
)
from .media_models import StoredFile

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB
_FORBIDDEN_SEQUENCES = ("..", "/", "\\", "\x00")


def validate_identifier(identifier: str) -> str:
    """Reject identifiers that could resolve outside a store directory."""

    if not identifier or identifier.startswith("."):
        raise InvalidIdentifierError(identifier)
    if any(sequence in identifier for sequence in _FORBIDDEN_SEQUENCES):
        raise InvalidIdentifierError(identifier)
    return identifier


@dataclass(slots=True)
class MediaStore:
    """Manage the incoming and derived directories.

    All writes go through a temporary sibling file followed by
    :func:`os.replace`, so readers observe either the previous content or the
    new one.
    """

    paths: MediaPaths
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def ensure_structure(self) -> None:
        ensure_media_paths(self.paths)

    @staticmethod
    def new_identifier() -> str:
        return uuid.uuid4().hex

    def incoming_path(self, identifier: str) -> Path:
        return self._child(self.paths.incoming, identifier)

    def derived_path(self, name: str) -> Path:
        return self._child(self.paths.derived, name)

    async def persist_upload(
        self,
        identifier: str,
        upload: UploadFile,
        *,
        max_bytes: int,
        chunk_size: int = CHUNK_SIZE,
    ) -> int:
        """Stream ``upload`` into the incoming store and return its size."""

        target = self.incoming_path(identifier)
        temp = self._temp_sibling(target)
        size = 0
        try:
            with temp.open("wb") as sink:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > max_bytes:
                        raise PayloadTooLargeError(size)
                    sink.write(chunk)
            os.replace(temp, target)
        finally:
            temp.unlink(missing_ok=True)
        self.log.info(
            "media.incoming.persisted",
            extra={"identifier": identifier, "size_bytes": size, "path": str(target)},
        )
        return size

    def read_incoming(self, identifier: str) -> bytes:
        path = self.incoming_path(identifier)
        try:
            return path.read_bytes()
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise SourceNotFoundError(identifier) from exc

    def commit_derived(self, payloads: Mapping[str, bytes]) -> dict[str, Path]:
        """Publish a set of derived files together or not at all.

        Every payload is staged to a temporary sibling first; only then are
        the staged files renamed into place. If any step fails, staged files
        and targets already renamed in this call are removed before the error
        propagates.
        """

        targets = {name: self.derived_path(name) for name in payloads}
        staged: dict[str, Path] = {}
        committed: list[Path] = []
        try:
            for name, data in payloads.items():
                temp = self._temp_sibling(targets[name])
                staged[name] = temp
                temp.write_bytes(data)
            for name, temp in staged.items():
                os.replace(temp, targets[name])
                committed.append(targets[name])
        except OSError:
            for path in (*staged.values(), *committed):
                try:
                    path.unlink(missing_ok=True)
                except OSError:
                    self.log.warning("media.derived.rollback_failed", extra={"path": str(path)})
            raise
        return targets

    def resolve_derived(self, name: str) -> Path:
        """Return the path of an existing derived file."""

        path = self.derived_path(name)
        if not path.is_file():
            raise AssetNotFoundError(name)
        return path

    def iter_files(self, directory: Path) -> Iterator[StoredFile]:
        """Yield regular files of ``directory`` with their modification time."""

        if not directory.exists():
            return
        with os.scandir(directory) as entries:
            for entry in entries:
                try:
                    if not entry.is_file(follow_symlinks=False):
                        continue
                    modified = entry.stat(follow_symlinks=False).st_mtime
                except FileNotFoundError:
                    continue
                yield StoredFile(
                    name=entry.name,
                    path=Path(entry.path),
                    modified_at=datetime.fromtimestamp(modified, tz=timezone.utc),
                )

    def iter_older_than(self, directory: Path, cutoff: datetime) -> Iterator[StoredFile]:
        for stored in self.iter_files(directory):
            if stored.modified_at < cutoff:
                yield stored

    @staticmethod
    def delete(path: Path) -> None:
        path.unlink()

    @staticmethod
    def _child(directory: Path, name: str) -> Path:
        validate_identifier(name)
        candidate = directory / name
        if candidate.resolve().parent != directory.resolve():
            raise InvalidIdentifierError(name)
        return candidate

    @staticmethod
    def _temp_sibling(target: Path) -> Path:
        return target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")


__all__ = ["MediaStore", "validate_identifier"]
