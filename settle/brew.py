"""Homebrew packages, taps and casks managed through a Brewfile."""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
import urllib.request
from dataclasses import dataclass, field

BREW_INSTALL_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(text: str) -> str:
    out = []
    for ch in text:
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    return '"' + "".join(out) + '"'


class BrewError(RuntimeError):
    """Homebrew could not be installed or run."""


@dataclass(frozen=True)
class Tap:
    """A third-party repository."""

    repo: str
    url: str = ""

    def __str__(self) -> str:
        if not self.url:
            return f'tap "{self.repo}"'
        return f'tap "{self.repo}", "{self.url}"'


@dataclass(frozen=True)
class Pkg:
    """A formula, with optional install arguments."""

    name: str
    args: tuple[str, ...] = ()

    def __str__(self) -> str:
        line = f"brew {_quote(self.name)}"
        if self.args:
            line += ", args: [" + ",".join(_quote(arg) for arg in self.args) + "]"
        return line


@dataclass(frozen=True)
class Cask:
    """A cask."""

    name: str

    def __str__(self) -> str:
        return f'cask "{self.name}"'


def _same(left, right) -> bool:
    if len(left) != len(right):
        return False
    seen = {str(item) for item in left}
    return all(str(item) in seen for item in right)


def _run(command: list[str], description: str) -> None:
    try:
        result = subprocess.run(
            command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError as exc:
        raise BrewError(f"error running `{description}`: {exc}\n") from exc
    if result.returncode != 0:
        output = (result.stdout or b"").decode(errors="replace")
        raise BrewError(
            f"error running `{description}`: exit status {result.returncode}\n{output}"
        )


def ensure_brew_installed() -> None:
    """Install Homebrew with its official script unless it is already on PATH."""
    if shutil.which("brew"):
        return
    try:
        with urllib.request.urlopen(BREW_INSTALL_URL) as response:
            script = response.read()
    except OSError as exc:
        raise BrewError(f"error fetching brew install script: {exc}") from exc
    try:
        with tempfile.NamedTemporaryFile("wb", delete=False) as handle:
            handle.write(script)
        os.chmod(handle.name, 0o755)
    except OSError as exc:
        raise BrewError(f"error writing brew install script: {exc}") from exc
    try:
        result = subprocess.run(["bash", "-c", handle.name], check=False)
    except OSError as exc:
        raise BrewError(f"error installing brew: {exc}") from exc
    if result.returncode != 0:
        raise BrewError(f"error installing brew: exit status {result.returncode}")


@dataclass
class Brew:
    """Taps, formulae and casks to keep installed."""

    taps: list[Tap] = field(default_factory=list)
    pkgs: list[Pkg] = field(default_factory=list)
    casks: list[Cask] = field(default_factory=list)

    def brewfile(self) -> str:
        """The Brewfile text: taps, then formulae, then casks."""
        return "\n".join(str(item) for item in (*self.taps, *self.pkgs, *self.casks))

    def same_as(self, other: Brew) -> bool:
        """Whether both hold the same entries, in any order."""
        return (
            _same(self.taps, other.taps)
            and _same(self.pkgs, other.pkgs)
            and _same(self.casks, other.casks)
        )

    def ensure(self) -> None:
        """Install everything in the Brewfile and remove what is not in it."""
        try:
            ensure_brew_installed()
        except BrewError as exc:
            raise BrewError(f"error ensuring brew is installed: {exc}") from exc
        try:
            with tempfile.NamedTemporaryFile("w", delete=False) as handle:
                print("writing temporary Brewfile to:", handle.name)
                handle.write(self.brewfile())
        except OSError as exc:
            raise BrewError(f"error creating temporary Brewfile: {exc}") from exc
        print("installing packages with `brew bundle`")
        _run(["brew", "bundle", "--file", handle.name], "brew bundle")
        print("cleaning up orphan packages with `brew bundle cleanup`")
        _run(
            ["brew", "bundle", "cleanup", "--force", "--file", handle.name],
            "brew bundle cleanup",
        )

    def to_data(self) -> dict:
        """The stanza as plain data."""
        pkgs = []
        for pkg in self.pkgs:
            entry: dict = {"name": pkg.name}
            if pkg.args:
                entry["args"] = list(pkg.args)
            pkgs.append(entry)
        return {
            "taps": [{"repo": tap.repo, "url": tap.url} for tap in self.taps],
            "pkgs": pkgs,
            "casks": [cask.name for cask in self.casks],
        }


def _string(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BrewError(f"{key} must be a string")
    return value


def _entries(data: dict, key: str) -> list:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise BrewError(f"{key} must be a list")
    return value


def _mapping(entry, what: str) -> dict:
    if not isinstance(entry, dict):
        raise BrewError(f"each {what} must be a mapping")
    return entry


def parse_brew(data) -> Brew:
    """Build a Brew stanza from decoded configuration data, rejecting duplicates."""
    if not isinstance(data, dict):
        raise BrewError("brew: expected a mapping")

    taps: list[Tap] = []
    seen: set[str] = set()
    for entry in _entries(data, "taps"):
        entry = _mapping(entry, "tap")
        tap = Tap(_string(entry, "repo"), _string(entry, "url"))
        if str(tap) in seen:
            raise BrewError(f"error: contains duplicate tap {tap}")
        seen.add(str(tap))
        taps.append(tap)

    pkgs: list[Pkg] = []
    names: set[str] = set()
    for entry in _entries(data, "pkgs"):
        entry = _mapping(entry, "package")
        args = _entries(entry, "args")
        if not all(isinstance(arg, str) for arg in args):
            raise BrewError("package args must be strings")
        pkg = Pkg(_string(entry, "name"), tuple(args))
        if pkg.name in names:
            raise BrewError(f"error: contains duplicate package {pkg.name}")
        names.add(pkg.name)
        pkgs.append(pkg)

    casks: list[Cask] = []
    cask_names: set[str] = set()
    for entry in _entries(data, "casks"):
        if not isinstance(entry, str):
            raise BrewError("casks must be strings")
        if entry in cask_names:
            raise BrewError(f"error: contains duplicate cask {entry}")
        cask_names.add(entry)
        casks.append(Cask(entry))

    return Brew(taps, pkgs, casks)