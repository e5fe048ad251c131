import json
import os
from pathlib import Path

import pytest
import yaml

from settle.apt import Apt
from settle.brew import Brew, Cask
from settle.config import (
    Config,
    ConfigError,
    load,
    parse_config,
    read_settings,
    write_backup,
)
from settle.files import FileMapping, Files
from settle.nvim import Nvim
from settle.pacman import Pacman
from settle.zsh import Zsh


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return tmp_path


def test_load_reads_stanzas(workdir):
    cfg = workdir / "settle.yaml"
    cfg.write_text("apt:\n  - git\n  - curl\n")
    config = load(str(cfg))
    assert config.apt.packages == ["git", "curl"]
    assert config.brew is None and config.zsh is None and config.files is None
    assert config.abs_path == str(cfg)


def test_load_defaults_to_settle_yaml(workdir):
    (workdir / "settle.yaml").write_text("pacman:\n  - vim\n")
    config = load("")
    assert config.pacman.packages == ["vim"]
    assert Path(config.abs_path).resolve() == (workdir / "settle.yaml").resolve()


def test_load_changes_directory(workdir):
    sub = workdir / "dots"
    sub.mkdir()
    (sub / "settle.yaml").write_text("apt: []\n")
    load(str(sub / "settle.yaml"))
    assert Path.cwd().resolve() == sub.resolve()


def test_load_missing_file(workdir):
    with pytest.raises(ConfigError, match="error reading config file"):
        load(str(workdir / "absent.yaml"))


def test_load_invalid_stanza(workdir):
    (workdir / "settle.yaml").write_text("apt: notalist\n")
    with pytest.raises(ConfigError, match="error parsing config file"):
        load("")


def test_files_resolved_against_config_dir(workdir):
    sub = workdir / "dots"
    sub.mkdir()
    (sub / "settle.yaml").write_text("files:\n  - src: vimrc\n    dst: ~/.vimrc\n")
    config = load(str(sub / "settle.yaml"))
    expected = FileMapping(
        os.path.join(os.getcwd(), "vimrc"), str(workdir / "home" / ".vimrc")
    )
    assert config.files.mappings == [expected]


def test_includes_are_overridden_by_own_stanzas(workdir):
    (workdir / "base.yaml").write_text("apt:\n  - git\nbrew:\n  casks:\n    - firefox\n")
    (workdir / "settle.yaml").write_text("includes:\n  - base.yaml\napt:\n  - curl\n")
    config = load("")
    assert config.apt.packages == ["curl"]
    assert config.brew.casks == [Cask("firefox")]


def test_later_include_replaces_earlier(workdir):
    (workdir / "a.yaml").write_text("apt:\n  - git\n")
    (workdir / "b.yaml").write_text("pacman:\n  - vim\n")
    (workdir / "settle.yaml").write_text("includes:\n  - a.yaml\n  - b.yaml\n")
    config = load("")
    assert config.apt is None
    assert config.pacman.packages == ["vim"]


def test_missing_include(workdir):
    (workdir / "settle.yaml").write_text("includes:\n  - gone.yaml\n")
    with pytest.raises(ConfigError, match="gone.yaml"):
        load("")


def test_parse_config_of_nothing():
    assert parse_config(None) == Config()


def test_load_with_target(workdir):
    (workdir / "settle.yaml").write_text("apt:\n  - git\nzsh:\n  prefix: hi\n")
    config = load("", "zsh")
    assert config.apt is None
    assert config.zsh.prefix == "hi"


def test_only_keeps_single_stanza():
    config = Config(apt=Apt(["git"]), brew=Brew(), abs_path="/x/settle.yaml")
    assert config.only("brew") == Config(brew=Brew())


@pytest.mark.parametrize("target", ["", "apt", "unknown"])
def test_only_unknown_target_keeps_everything(target):
    config = Config(apt=Apt(["git"]), pacman=Pacman(["vim"]))
    assert config.only(target) == config


def test_json_round_trip():
    config = Config(apt=Apt(["git"]), zsh=Zsh(paths=["/bin"]))
    assert json.loads(config.json()) == config.to_data()
    assert json.loads(config.json())["brew"] is None


def test_json_hides_nvim_config():
    config = Config(nvim=Nvim(config="set number"))
    assert json.loads(config.json())["nvim"]["config"] == '"(omitted for brevity)"'


def test_json_escapes_html_characters():
    config = Config(zsh=Zsh(prefix="a<b"))
    assert "a\\u003cb" in config.json()
    assert json.loads(config.json())["zsh"]["prefix"] == "a<b"


def test_yaml_round_trip_and_sorted_keys():
    config = Config(apt=Apt(["git"]), zsh=Zsh(suffix="end"))
    text = config.yaml()
    assert yaml.safe_load(text) == config.to_data()
    top = [line.split(":")[0] for line in text.splitlines() if line and not line[0].isspace()]
    assert top == sorted(config.to_data())


def test_ensure_writes_zshrc(workdir):
    config = Config(zsh=Zsh(prefix="# top"))
    config.ensure()
    assert (workdir / "home" / ".zshrc").read_text() == config.zsh.render()


def test_ensure_wraps_errors(workdir):
    blocker = workdir / "afile"
    blocker.write_text("x")
    config = Config(files=Files([FileMapping(str(workdir / "src"), str(blocker / "link"))]))
    with pytest.raises(ConfigError, match="^error ensuring files"):
        config.ensure()


def test_read_settings(tmp_path):
    settings = tmp_path / "settings.yaml"
    assert read_settings(settings) == ""
    settings.write_text("configPath: /some/settle.yaml\n")
    assert read_settings(settings) == "/some/settle.yaml"
    settings.write_text("configPath: [unclosed\n")
    with pytest.raises(ConfigError, match="yaml unmarshal"):
        read_settings(settings)


def test_write_backup(tmp_path):
    config = Config(apt=Apt(["git"]), abs_path="/dots/settle.yaml")
    backup = write_backup(config, tmp_path)
    settings = tmp_path / ".config" / "settle" / "settings.yaml"
    assert read_settings(settings) == config.abs_path
    assert backup.read_text() == config.yaml()
    assert list((tmp_path / ".local" / "share" / "settle").iterdir()) == [backup]