"""Symlinking managed files into place."""

from __future__ import annotations

import os
import posixpath
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class FileMapping:
    """A source file and the place it should be linked to."""

    src: str
    dst: str


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def expand_tilde(path: str, home: str) -> str:
    """Replace every path component that is exactly "~" with home."""
    components = [home if part == "~" else part for part in path.split(os.sep)]
    if path.startswith("/"):
        components.insert(0, "/")
    parts = [part for part in components if part]
    if not parts:
        return ""
    return _clean("/".join(parts))


def _string(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"files: {key} must be a string")
    return value


def parse_mapping(data) -> FileMapping:
    """Build a mapping, resolving src against the working directory and ~ in dst."""
    if not isinstance(data, dict):
        raise ValueError("files: each entry must be a mapping with src and dst")
    src = os.path.abspath(_string(data, "src"))
    dst = expand_tilde(_string(data, "dst"), str(Path.home()))
    return FileMapping(src, dst)


@dataclass
class Files:
    """Files to symlink into place."""

    mappings: list[FileMapping] = field(default_factory=list)

    def __iter__(self) -> Iterator[FileMapping]:
        return iter(self.mappings)

    def __len__(self) -> int:
        return len(self.mappings)

    def ensure(self) -> None:
        """Make every destination a symlink to its source."""
        for mapping in self.mappings:
            try:
                info = os.lstat(mapping.dst)
            except FileNotFoundError:
                info = None
            if info is not None:
                if stat.S_ISLNK(info.st_mode) and os.readlink(mapping.dst) == mapping.src:
                    continue
                print("file exists, deleting it:", mapping.dst)
                if stat.S_ISDIR(info.st_mode):
                    os.rmdir(mapping.dst)
                else:
                    os.remove(mapping.dst)
            parent = os.path.dirname(mapping.dst)
            if parent:
                os.makedirs(parent, mode=0o755, exist_ok=True)
            print(f"symlinking {mapping.src} to {mapping.dst}")
            os.symlink(mapping.src, mapping.dst)

    def to_data(self) -> list[dict]:
        """The stanza as plain data."""
        return [{"src": m.src, "dst": m.dst} for m in self.mappings]


def parse_files(data) -> Files:
    """Build a Files stanza from decoded configuration data."""
    if not isinstance(data, list):
        raise ValueError("files: expected a list of mappings")
    return Files([parse_mapping(entry) for entry in data])