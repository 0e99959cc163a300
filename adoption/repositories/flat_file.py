"""
Flat-file persistence for the three record collections.

Each save truncates and rewrites the whole file; there is no temp file or
atomic rename, so a crash mid-write can leave a truncated file behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, TypeVar
import logging

from adoption.core.config import Settings, get_settings
from adoption.core.errors import FileOperationError, InvalidFormatError
from adoption.domain.records import Application, Pet, User
from adoption.repositories import codec

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ApplicationsSnapshot:
    applications: list[Application]
    next_id: int


class FlatFileStorage:
    """Reads and writes users.dat, pets.dat and applications.dat."""

    def __init__(self, users_file: Path, pets_file: Path, applications_file: Path) -> None:
        self.users_file = users_file
        self.pets_file = pets_file
        self.applications_file = applications_file

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "FlatFileStorage":
        settings = settings or get_settings()
        return cls(settings.users_file, settings.pets_file, settings.applications_file)

    # -------------------------- helpers --------------------------
    def _read_lines(self, path: Path) -> list[str]:
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8", newline="") as f:
                return [line.rstrip("\r\n") for line in f]
        except OSError as exc:
            raise FileOperationError(f"Cannot read {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise InvalidFormatError(f"{path.name}: not valid UTF-8 text ({exc.reason} at byte {exc.start})") from exc

    def _write_lines(self, path: Path, lines: Iterable[str]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8", newline="") as f:
                for line in lines:
                    f.write(line + "\n")
        except OSError as exc:
            raise FileOperationError(f"Cannot write {path}: {exc}") from exc
        logger.debug("Saved %s", path)

    def _decode_all(self, path: Path, lines: list[str], decode: Callable[[str], T], start: int = 1) -> list[T]:
        records: list[T] = []
        for number, line in enumerate(lines, start=start):
            if not line.strip():
                continue
            try:
                records.append(decode(line))
            except InvalidFormatError as exc:
                raise InvalidFormatError(f"{path.name}:{number}: {exc.message}") from exc
        return records

    # -------------------------- users --------------------------
    def load_users(self) -> list[User]:
        return self._decode_all(self.users_file, self._read_lines(self.users_file), codec.decode_user)

    def save_users(self, users: Iterable[User]) -> None:
        self._write_lines(self.users_file, (codec.encode_user(u) for u in users))

    # -------------------------- pets --------------------------
    def load_pets(self) -> list[Pet]:
        return self._decode_all(self.pets_file, self._read_lines(self.pets_file), codec.decode_pet)

    def save_pets(self, pets: Iterable[Pet]) -> None:
        self._write_lines(self.pets_file, (codec.encode_pet(p) for p in pets))

    # -------------------------- applications --------------------------
    def load_applications(self) -> ApplicationsSnapshot:
        lines = self._read_lines(self.applications_file)
        header_id = 1
        start = 1
        if lines and lines[0].startswith(codec.NEXT_ID_PREFIX):
            try:
                header_id = codec.decode_next_id(lines[0])
            except InvalidFormatError as exc:
                raise InvalidFormatError(f"{self.applications_file.name}:1: {exc.message}") from exc
            lines = lines[1:]
            start = 2
        applications = self._decode_all(self.applications_file, lines, codec.decode_application, start=start)
        highest = max((a.id for a in applications), default=0)
        return ApplicationsSnapshot(applications=applications, next_id=max(header_id, highest + 1))

    def save_applications(self, applications: Iterable[Application], next_id: int) -> None:
        lines = [codec.encode_next_id(next_id)]
        lines.extend(codec.encode_application(a) for a in applications)
        self._write_lines(self.applications_file, lines)
