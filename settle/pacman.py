"""Arch Linux package installation through pacman."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field


class PacmanError(RuntimeError):
    """A pacman command could not be run or exited with an error."""


@dataclass
class Pacman:
    """Packages to install with pacman."""

    packages: list[str] = field(default_factory=list)

    def install_command(self) -> list[str]:
        """The command line that installs every package."""
        return ["sudo", "pacman", "-S", "--noconfirm", *self.packages]

    def ensure(self) -> None:
        """Install the packages."""
        print("installing packages with `sudo pacman -S --noconfirm`")
        try:
            result = subprocess.run(
                self.install_command(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise PacmanError(f"error running `pacman`: {exc}\n") from exc
        if result.returncode != 0:
            output = (result.stdout or b"").decode(errors="replace")
            raise PacmanError(
                f"error running `pacman`: exit status {result.returncode}\n{output}"
            )

    def to_data(self) -> list[str]:
        """The stanza as plain data."""
        return list(self.packages)


def parse_pacman(data) -> Pacman:
    """Build a Pacman stanza from decoded configuration data."""
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise ValueError("pacman: expected a list of package names")
    return Pacman(list(data))