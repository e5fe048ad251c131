"""Debian package installation through apt."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field


class AptError(RuntimeError):
    """An apt command could not be run or exited with an error."""


def _run(command: list[str], description: str) -> None:
    try:
        result = subprocess.run(
            command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, check=False
        )
    except OSError as exc:
        raise AptError(f"error running `{description}`: {exc}\n") from exc
    if result.returncode != 0:
        output = (result.stdout or b"").decode(errors="replace")
        raise AptError(
            f"error running `{description}`: exit status {result.returncode}\n{output}"
        )


@dataclass
class Apt:
    """Packages to install with apt."""

    packages: list[str] = field(default_factory=list)

    def install_command(self) -> list[str]:
        """The command line that installs every package."""
        return ["sudo", "apt", "install", "-y", *self.packages]

    def ensure(self) -> None:
        """Install the packages, then remove orphaned ones."""
        print("installing packages with `sudo apt install`")
        _run(self.install_command(), "sudo apt install")
        print("cleaning up orphan packages with `sudo apt autoremove`")
        _run(["sudo", "apt", "autoremove", "-y"], "sudo apt autoremove")

    def to_data(self) -> list[str]:
        """The stanza as plain data."""
        return list(self.packages)


def parse_apt(data) -> Apt:
    """Build an Apt stanza from decoded configuration data."""
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise ValueError("apt: expected a list of package names")
    return Apt(list(data))