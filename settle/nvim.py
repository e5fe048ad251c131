"""Neovim configuration and plugin management with paq."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path


class NvimError(RuntimeError):
    """Neovim could not be configured."""


PAQ_BOOTSTRAP = """-- boostrap paq
local fn = vim.fn
local install_path = fn.stdpath('data') .. '/site/pack/paqs/start/paq-nvim'
if fn.empty(fn.glob(install_path)) > 0 then
  fn.system({'git', 'clone', '--depth=1', 'https://github.com/savq/paq-nvim.git', install_path})
end
"""

INSTALL_COMMAND = ["nvim", "--headless", "+PaqInstall", "+qa"]


@dataclass(frozen=True)
class Plugin:
    """A paq plugin entry."""

    name: str
    opt: bool = False
    run: str = ""

    def __str__(self) -> str:
        components = [f'"{self.name}"']
        if self.opt:
            components.append("opt=true")
        if self.run:
            components.append(f'run="{self.run}"')
        return "{" + ", ".join(components) + "}"


@dataclass
class Nvim:
    """Plugins and extra configuration for init.lua."""

    plugins: list[Plugin] = field(default_factory=list)
    config: str = ""

    def init_lua(self) -> str:
        """The full text of init.lua."""
        lines = [PAQ_BOOTSTRAP, 'require "paq" {']
        lines.extend(f"  {plugin};" for plugin in self.plugins)
        lines.extend(["}", "\n", self.config])
        return "\n".join(lines)

    def write_init_lua(self, home=None) -> Path | None:
        """Write init.lua under home; return its path, or None if nothing to write."""
        if not self.plugins and not self.config:
            return None
        path = Path(home if home is not None else Path.home()) / ".config" / "nvim" / "init.lua"
        path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        print("writing vim config to", path)
        with open(path, "w", opener=lambda p, flags: os.open(p, flags, 0o755)) as handle:
            handle.write(self.init_lua())
        return path

    def ensure(self, home=None) -> None:
        """Write init.lua and install the plugins."""
        try:
            self.write_init_lua(home)
        except OSError as exc:
            raise NvimError(f"error ensuring init.lua: {exc}") from exc
        print("installing neovim plugins")
        try:
            result = subprocess.run(
                INSTALL_COMMAND, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
            )
        except OSError as exc:
            raise NvimError(f"error running neovim plugin sync commands: {exc}\n") from exc
        if result.returncode != 0:
            output = (result.stdout or b"").decode(errors="replace")
            raise NvimError(
                "error running neovim plugin sync commands: "
                f"exit status {result.returncode}\n{output}"
            )

    def to_data(self) -> dict:
        """The stanza as plain data; the config text itself is not shown."""
        plugins = []
        for plugin in self.plugins:
            entry: dict = {"name": plugin.name}
            if plugin.opt:
                entry["opt"] = True
            if plugin.run:
                entry["run"] = plugin.run
            plugins.append(entry)
        config = '"(omitted for brevity)"' if self.config else "(empty)"
        return {"plugins": plugins, "config": config}


def _parse_plugin(data) -> Plugin:
    if not isinstance(data, dict):
        raise ValueError("nvim: each plugin must be a mapping")
    name = data.get("name") or ""
    opt = data.get("opt") or False
    run = data.get("run") or ""
    if not isinstance(name, str) or not isinstance(run, str) or not isinstance(opt, bool):
        raise ValueError("nvim: plugin fields have the wrong type")
    return Plugin(name, opt, run)


def parse_nvim(data) -> Nvim:
    """Build an Nvim stanza from decoded configuration data."""
    if not isinstance(data, dict):
        raise ValueError("nvim: expected a mapping")
    plugins = data.get("plugins") or []
    if not isinstance(plugins, list):
        raise ValueError("nvim: plugins must be a list")
    config = data.get("config") or ""
    if not isinstance(config, str):
        raise ValueError("nvim: config must be a string")
    return Nvim([_parse_plugin(p) for p in plugins], config)