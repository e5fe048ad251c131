# settle

`settle` brings a machine into the state described by a single YAML file.
It can:

- symlink dotfiles into place (`files`)
- install Homebrew taps, formulae and casks through a generated Brewfile,
  installing Homebrew itself with its install script if `brew` is not on
  `PATH`, and remove whatever the Brewfile does not list (`brew`)
- install packages with `sudo apt install -y` followed by
  `sudo apt autoremove -y` (`apt`), or with `sudo pacman -S --noconfirm`
  (`pacman`)
- write `~/.config/nvim/init.lua` with a paq bootstrap, a list of paq plugins
  and your own configuration, then run `nvim --headless +PaqInstall +qa`
  (`nvim`)
- write `~/.zshrc` from history options, paths, variables, aliases and
  functions (`zsh`)

Sections are applied in this order: `files`, `apt`, `brew`, `pacman`, `nvim`,
`zsh`. A section that is absent from the file is skipped.

## Installation

```
pip install .
```

## Configuration

Without `-config`, `settle` uses the path recorded in
`~/.config/settle/settings.yaml`, and if there is none, `settle.yaml` in the
current directory. Before reading the file, `settle` changes into the
directory that holds it, so relative paths (including `includes` and `src`
entries) are resolved against that directory.

```yaml
includes:
  - common.yaml          # sections given in this file override included ones

files:
  - src: dotfiles/gitconfig
    dst: ~/.gitconfig

brew:
  taps:
    - repo: homebrew/cask-fonts
  pkgs:
    - name: ripgrep
    - name: neovim
      args: ["HEAD"]
  casks:
    - firefox

apt:
  - ripgrep
  - zsh

pacman:
  - ripgrep

nvim:
  plugins:
    - name: savq/paq-nvim
    - name: nvim-treesitter/nvim-treesitter
      run: ":TSUpdate"
  config: |
    vim.o.number = true

zsh:
  history:
    size: 10000
    share_history: true
    ignore_space: true
  paths:
    - $HOME/bin
  variables:
    - name: EDITOR
      value: nvim
  aliases:
    - name: ll
      value: ls -la
  functions:
    - name: mkcd
      value: |-
        mkdir -p "$1"
        cd "$1"
  prefix: "# generated by settle"
  suffix: ""
```

Notes on the sections:

- `includes`: each listed file is read in turn and the result of a later
  include replaces that of an earlier one as a whole; the sections written in
  the main file then override those from the includes.
- `files`: `src` is made absolute; every `~` path component of `dst` is
  replaced with your home directory. A destination that already exists and is
  not a symlink to `src` is deleted (an empty directory is removed too) before
  the link is created; missing parent directories are created.
- `brew`: duplicate taps, packages or casks are rejected when the file is
  read.
- `zsh`: if `paths` is not empty, `$PATH` is appended unless it is already
  listed, and the result is exported as `PATH`.

## Usage

Apply the whole configuration (`ensure` is the default command):

```
settle
settle ensure -config path/to/settle.yaml
```

Apply a single section only:

```
settle ensure -target brew
```

The targets that select a section are `files`, `brew`, `pacman`, `nvim` and
`zsh`; any other non-empty value applies the whole configuration.

After a run without `-target`, `settle` records the config path in
`~/.config/settle/settings.yaml`, so later runs without `-config` use the same
file, and saves a copy of the configuration as YAML under
`~/.local/share/settle/`, named after the current local time
(`YYYY-MM-DD HH:MM:SS.yaml`). Runs with `-target` skip both steps.

Show the resolved configuration, with includes merged:

```
settle dump-config
settle dump-config -format yaml -target zsh
```

`-format` is `json` (the default) or `yaml`. The text of the `nvim` `config`
section is not printed; it shows as a placeholder saying whether it is empty.

Print the version:

```
settle version
settle version -verbose
```

Errors are printed to standard error prefixed with `error:` and the command
exits with status 1.

## Use as a library

```python
from settle.config import load

config = load("settle.yaml", target="zsh")
print(config.yaml())
config.ensure()
```

`settle.config` also provides `parse_config`, `read_settings` and
`write_backup`; each section has its own module (`settle.files`,
`settle.brew`, `settle.apt`, `settle.pacman`, `settle.nvim`, `settle.zsh`)
with a `parse_*` function and a class whose `ensure()` applies it.

## Development

```
pip install -e '.[test]'
pytest
```