import io
import os
import shutil
import subprocess
import urllib.error
import urllib.request

import pytest

from settle.brew import Brew, BrewError, Cask, Pkg, Tap, ensure_brew_installed, parse_brew


class _FakeRun:
    def __init__(self, returncode=0, output=b""):
        self.returncode = returncode
        self.output = output
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append(list(command))
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.output)


def test_tap_strings():
    assert str(Tap("homebrew/cask-fonts")) == 'tap "homebrew/cask-fonts"'
    assert str(Tap("user/repo", "git@example.com:repo.git")) == 'tap "user/repo", "git@example.com:repo.git"'


def test_pkg_strings():
    assert str(Pkg("git")) == 'brew "git"'
    assert str(Pkg("vim", ("with-lua", "HEAD"))) == 'brew "vim", args: ["with-lua","HEAD"]'


def test_cask_string():
    assert str(Cask("firefox")) == 'cask "firefox"'


def test_brewfile_order():
    brew = Brew([Tap("a/b")], [Pkg("git")], [Cask("firefox")])
    assert brew.brewfile().split("\n") == [str(Tap("a/b")), str(Pkg("git")), str(Cask("firefox"))]


def test_parse_round_trip():
    data = {
        "taps": [{"repo": "a/b", "url": ""}],
        "pkgs": [{"name": "git"}, {"name": "vim", "args": ["HEAD"]}],
        "casks": ["firefox"],
    }
    brew = parse_brew(data)
    assert brew.to_data() == data
    assert parse_brew(brew.to_data()) == brew


@pytest.mark.parametrize(
    "data, message",
    [
        ({"taps": [{"repo": "a/b"}, {"repo": "a/b"}]}, "duplicate tap"),
        ({"pkgs": [{"name": "git"}, {"name": "git", "args": ["x"]}]}, "duplicate package git"),
        ({"casks": ["firefox", "firefox"]}, "duplicate cask firefox"),
    ],
)
def test_parse_rejects_duplicates(data, message):
    with pytest.raises(BrewError, match=message):
        parse_brew(data)


def test_same_as_ignores_order():
    one = Brew([], [Pkg("a"), Pkg("b")], [Cask("c")])
    two = Brew([], [Pkg("b"), Pkg("a")], [Cask("c")])
    assert one.same_as(two)
    assert not one.same_as(Brew([], [Pkg("a")], [Cask("c")]))
    assert not one.same_as(Brew([], [Pkg("a"), Pkg("z")], [Cask("c")]))


def test_ensure_runs_bundle_with_brewfile(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: "/usr/local/bin/brew")
    fake = _FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    brew = Brew([Tap("a/b")], [Pkg("git")], [])
    brew.ensure()
    path = fake.calls[0][-1]
    try:
        assert fake.calls == [
            ["brew", "bundle", "--file", path],
            ["brew", "bundle", "cleanup", "--force", "--file", path],
        ]
        with open(path) as handle:
            assert handle.read() == brew.brewfile()
    finally:
        os.remove(path)


def test_ensure_reports_bundle_failure(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: "/usr/local/bin/brew")
    fake = _FakeRun(returncode=1, output=b"no such formula")
    monkeypatch.setattr(subprocess, "run", fake)
    with pytest.raises(BrewError, match="no such formula"):
        Brew([], [Pkg("nope")], []).ensure()
    os.remove(fake.calls[0][-1])


def test_install_fetch_failure(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: None)

    def offline(url):
        raise urllib.error.URLError("offline")

    monkeypatch.setattr(urllib.request, "urlopen", offline)
    with pytest.raises(BrewError, match="fetching brew install script"):
        ensure_brew_installed()


def test_install_skipped_when_brew_present(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: "/usr/local/bin/brew")
    fake = _FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    assert ensure_brew_installed() is None
    assert fake.calls == []


def test_install_runs_downloaded_script(monkeypatch):
    monkeypatch.setattr(shutil, "which", lambda name: None)
    monkeypatch.setattr(urllib.request, "urlopen", lambda url: io.BytesIO(b"echo hi"))
    fake = _FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    assert ensure_brew_installed() is None
    assert len(fake.calls) == 1
    command = fake.calls[0]
    try:
        assert command[:2] == ["bash", "-c"]
        with open(command[2], "rb") as handle:
            assert handle.read() == b"echo hi"
        assert os.stat(command[2]).st_mode & 0o100
    finally:
        os.remove(command[2])