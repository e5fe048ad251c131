"""Loading, filtering, serialising and applying a settle configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

import yaml

from settle.apt import Apt, parse_apt
from settle.brew import Brew, parse_brew
from settle.files import Files, parse_files
from settle.nvim import Nvim, parse_nvim
from settle.pacman import Pacman, parse_pacman
from settle.zsh import Zsh, parse_zsh

DEFAULT_CONFIG_NAME = "settle.yaml"
BACKUP_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_PARSERS = (
    ("files", parse_files),
    ("brew", parse_brew),
    ("apt", parse_apt),
    ("pacman", parse_pacman),
    ("nvim", parse_nvim),
    ("zsh", parse_zsh),
)
_TARGETS = ("brew", "pacman", "files", "nvim", "zsh")
_JSON_ESCAPES = (
    ("&", "\\u0026"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class ConfigError(RuntimeError):
    """The configuration could not be read, parsed, written or applied."""


@dataclass
class Config:
    """Every stanza of a configuration; a stanza left out is None."""

    files: Files | None = None
    brew: Brew | None = None
    apt: Apt | None = None
    pacman: Pacman | None = None
    nvim: Nvim | None = None
    zsh: Zsh | None = None
    abs_path: str = ""

    def only(self, target: str) -> Config:
        """A config holding just the named stanza; unknown targets keep everything."""
        if target not in _TARGETS:
            return self
        return Config(**{target: getattr(self, target)})

    def to_data(self) -> dict:
        """The configuration as plain data, keyed by stanza name."""
        stanzas = (
            ("files", self.files),
            ("brew", self.brew),
            ("apt", self.apt),
            ("pacman", self.pacman),
            ("nvim", self.nvim),
            ("zsh", self.zsh),
        )
        return {
            name: stanza.to_data() if stanza is not None else None
            for name, stanza in stanzas
        }

    def json(self) -> str:
        """The configuration as indented JSON."""
        text = json.dumps(self.to_data(), indent=2, ensure_ascii=False)
        for char, escape in _JSON_ESCAPES:
            text = text.replace(char, escape)
        return text

    def yaml(self) -> str:
        """The configuration as YAML with sorted keys."""
        return yaml.safe_dump(
            self.to_data(), default_flow_style=False, sort_keys=True, allow_unicode=True
        )

    def ensure(self) -> None:
        """Apply every present stanza in turn."""
        steps = (
            ("files", self.files),
            ("apt", self.apt),
            ("brew", self.brew),
            ("pacman", self.pacman),
            ("nvim", self.nvim),
            ("zsh", self.zsh),
        )
        for name, stanza in steps:
            if stanza is None:
                continue
            try:
                stanza.ensure()
            except (OSError, RuntimeError, ValueError) as exc:
                raise ConfigError(f"error ensuring {name}: {exc}") from exc


def parse_config(data) -> Config:
    """Build a Config from decoded YAML, reading included files first.

    Each included file replaces what earlier includes produced; stanzas
    given directly then override the included ones.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")
    includes = data.get("includes") or []
    if not isinstance(includes, list) or not all(isinstance(i, str) for i in includes):
        raise ConfigError("includes must be a list of paths")

    final = Config()
    for include in includes:
        try:
            text = Path(include).read_text()
        except OSError as exc:
            raise ConfigError(f"error reading {include}: {exc}") from exc
        try:
            final = parse_config(yaml.safe_load(text))
        except (yaml.YAMLError, ValueError, RuntimeError) as exc:
            raise ConfigError(f"error unmarshaling {include}: {exc}") from exc

    overrides = {
        name: parser(data[name]) for name, parser in _PARSERS if data.get(name) is not None
    }
    return replace(final, **overrides)


def load(path: str = "", target: str = "") -> Config:
    """Load the config at path (settle.yaml by default).

    The working directory is changed to the config's directory so that
    relative paths inside it resolve correctly.
    """
    if not path:
        path = DEFAULT_CONFIG_NAME
    abs_path = os.path.abspath(path)
    config_dir = os.path.dirname(abs_path)
    try:
        os.chdir(config_dir)
    except OSError as exc:
        raise ConfigError(f"error changing directory to {config_dir}: {exc}") from exc
    try:
        text = Path(abs_path).read_text()
    except OSError as exc:
        raise ConfigError(f"error reading config file {abs_path}: {exc}") from exc
    try:
        config = parse_config(yaml.safe_load(text))
    except (yaml.YAMLError, ValueError, RuntimeError) as exc:
        raise ConfigError(f"error parsing config file: {exc}") from exc
    config.abs_path = abs_path
    return config.only(target)


def read_settings(path) -> str:
    """The config path recorded in a settings file, or "" if there is none."""
    try:
        text = Path(path).read_text()
    except FileNotFoundError:
        return ""
    except OSError as exc:
        raise ConfigError(f"reading: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"yaml unmarshal: {exc}") from exc
    if data is None:
        return ""
    if not isinstance(data, dict):
        raise ConfigError("yaml unmarshal: settings must be a mapping")
    value = data.get("configPath") or ""
    if not isinstance(value, str):
        raise ConfigError("yaml unmarshal: configPath must be a string")
    return value


def write_backup(config: Config, home=None) -> Path:
    """Record the config's location in settings.yaml and save a timestamped copy.

    Returns the path of the copy.
    """
    base = Path(home) if home is not None else Path.home()
    settings_text = yaml.safe_dump({"configPath": config.abs_path}, default_flow_style=False)

    settings_dir = base / ".config" / "settle"
    try:
        settings_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError:
        pass
    try:
        (settings_dir / "settings.yaml").write_text(settings_text)
    except OSError as exc:
        raise ConfigError(f"error writing settings.yaml: {exc}") from exc

    data_dir = base / ".local" / "share" / "settle"
    try:
        data_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError:
        pass
    backup = data_dir / f"{datetime.now().strftime(BACKUP_TIME_FORMAT)}.yaml"
    try:
        backup.write_text(config.yaml())
    except OSError as exc:
        raise ConfigError(f"error writing settle.yaml copy: {exc}") from exc
    return backup