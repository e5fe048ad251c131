"""Generating .zshrc."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

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


@dataclass
class History:
    """Shell history settings."""

    size: int = 0
    share_history: bool = False
    inc_append: bool = False
    ignore_all_dups: bool = False
    ignore_space: bool = False


@dataclass(frozen=True)
class KV:
    """A named value: a variable, alias or function body."""

    name: str
    value: str


@dataclass
class Zsh:
    """Everything that goes into .zshrc."""

    history: History = field(default_factory=History)
    paths: list[str] = field(default_factory=list)
    variables: list[KV] = field(default_factory=list)
    aliases: list[KV] = field(default_factory=list)
    functions: list[KV] = field(default_factory=list)
    prefix: str = ""
    suffix: str = ""

    def render(self) -> str:
        """The text of .zshrc."""
        parts = [self.prefix, "\n"]
        history = self.history
        if history.size != 0:
            parts.append("HISTFILE=~/.zsh_history\n")
            parts.append(f"HISTSIZE={history.size}\n")
            parts.append(f"SAVEHIST={history.size}\n")
        if history.share_history:
            parts.append("setopt SHARE_HISTORY\n")
        if history.inc_append:
            parts.append("setopt INC_APPEND_HISTORY\n")
        if history.ignore_all_dups:
            parts.append("setopt HIST_IGNORE_ALL_DUPS\n")
        if history.ignore_space:
            parts.append("setopt HIST_IGNORE_SPACE\n")
        parts.append("\n")

        if self.paths:
            paths = self.paths if "$PATH" in self.paths else [*self.paths, "$PATH"]
            parts.append(f"export PATH={_quote(':'.join(paths))}\n")
        parts.extend(f"export {kv.name}={kv.value}\n" for kv in self.variables)
        parts.append("\n")

        parts.extend(f'alias {kv.name}="{kv.value}"\n' for kv in self.aliases)
        parts.append("\n")

        for kv in self.functions:
            parts.append(f"function {kv.name}() {{\n")
            parts.extend(f"\t{line}\n" for line in kv.value.split("\n"))
            parts.append("}\n")
        parts.append("\n")

        parts.extend([self.suffix, "\n"])
        return "".join(parts)

    def ensure(self, home=None) -> Path:
        """Write .zshrc into home and return its path."""
        path = Path(home if home is not None else Path.home()) / ".zshrc"
        print("writing .zshrc")
        with open(path, "w", opener=lambda p, flags: os.open(p, flags, 0o644)) as handle:
            handle.write(self.render())
        return path

    def to_data(self) -> dict:
        """The stanza as plain data."""

        def pairs(items: list[KV]) -> list[dict]:
            return [{"name": kv.name, "value": kv.value} for kv in items]

        return {
            "history": {
                "size": self.history.size,
                "share_history": self.history.share_history,
                "inc_append": self.history.inc_append,
                "ignore_all_dups": self.history.ignore_all_dups,
                "ignore_space": self.history.ignore_space,
            },
            "paths": list(self.paths),
            "variables": pairs(self.variables),
            "aliases": pairs(self.aliases),
            "functions": pairs(self.functions),
            "prefix": self.prefix,
            "suffix": self.suffix,
        }


def _typed(data: dict, key: str, kind, default):
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"zsh: {key} has the wrong type")
    return value


def _pairs(data: dict, key: str) -> list[KV]:
    entries = _typed(data, key, list, [])
    result = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"zsh: each entry of {key} must be a mapping")
        result.append(KV(_typed(entry, "name", str, ""), _typed(entry, "value", str, "")))
    return result


def parse_zsh(data) -> Zsh:
    """Build a Zsh stanza from decoded configuration data."""
    if not isinstance(data, dict):
        raise ValueError("zsh: expected a mapping")
    raw_history = _typed(data, "history", dict, {})
    history = History(
        size=_typed(raw_history, "size", int, 0),
        share_history=_typed(raw_history, "share_history", bool, False),
        inc_append=_typed(raw_history, "inc_append", bool, False),
        ignore_all_dups=_typed(raw_history, "ignore_all_dups", bool, False),
        ignore_space=_typed(raw_history, "ignore_space", bool, False),
    )
    paths = _typed(data, "paths", list, [])
    if not all(isinstance(p, str) for p in paths):
        raise ValueError("zsh: paths must be strings")
    return Zsh(
        history=history,
        paths=list(paths),
        variables=_pairs(data, "variables"),
        aliases=_pairs(data, "aliases"),
        functions=_pairs(data, "functions"),
        prefix=_typed(data, "prefix", str, ""),
        suffix=_typed(data, "suffix", str, ""),
    )