# worktree

A Python library for working with git worktrees that carry their own state:
a name, an optional display name, a branch, a list of ports and the
directories involved. It reads and writes that state, merges user and
project settings, runs a project's lifecycle scripts, and opens worktrees
in a terminal or a named tmux session.

## Installation

```
pip install .
```

The only runtime dependency is `click`, used for coloured output.

## Worktree state

`worktree.state.WorktreeState` is the record kept in `state.json` in each
worktree directory.

```python
from worktree.state import WorktreeState, detect_worktree, detect_worktree_from

state = WorktreeState.create(
    "swift-falcon", "myproject", "/tmp/wt/swift-falcon",
    original_dir="/src/myproject", branch="worktree/swift-falcon",
    ports=[50000, 50001], display_name="login-fix",
)
state.allocation_key          # "myproject/swift-falcon"
state.effective_name()        # "login-fix"
state.matches_identifier("swift-falcon")   # True
state.save()                  # writes /tmp/wt/swift-falcon/state.json

WorktreeState.load("/tmp/wt/swift-falcon/state.json")
detect_worktree_from("/tmp/wt/swift-falcon/src")  # walks up to state.json
detect_worktree()                                 # same, from the current directory
```

`to_dict()` / `from_dict()` use camelCase keys (`projectName`,
`worktreeDir`, `createdAt`, ...). Errors are raised as
`worktree.state.WorktreeError`; the other error classes (`GitError`,
`ScriptError`, `TerminalError`) derive from it.

## Locations

`worktree.paths` gives the fixed locations:

- `user_config_file()` – `~/.config/worktree/config.json`
- `global_dir()` – `~/.worktree`
- `global_worktrees_dir()` – `~/.worktree/worktrees`
- `allocations_file()` – `~/.worktree/port-allocations.json`
- `project_config_dir_in(root)`, `settings_file_in(root)`,
  `local_settings_file_in(root)` – `.worktree/`, `.worktree/settings.json`,
  `.worktree/settings.local.json` under a project root

## Settings

`worktree.settings` holds three kinds of settings and their merge:

- `UserSettings` (`~/.config/worktree/config.json`): `autoLaunchTerminal`,
  `terminal`. `UserSettings.setup_interactive()` asks for both on the
  terminal and saves them; `ensure_configured()` does so only if the file is
  missing.
- `Settings` (`.worktree/settings.json`, shared with the team):

  | key                  | default     |
  |----------------------|-------------|
  | `portCount`          | `10`        |
  | `portRangeStart`     | `50000`     |
  | `portRangeEnd`       | `60000`     |
  | `branchPrefix`       | `worktree/` |
  | `autoLaunchTerminal` | unset       |
  | `terminal`           | unset       |

- `LocalSettings` (`.worktree/settings.local.json`, personal): `worktreeDir`.

`MergedSettings.load_from(root)` combines them, project values over user
values over defaults (`autoLaunchTerminal` defaults to true). If there is no
user configuration yet, it runs the interactive setup.
`get_worktree_base_dir(project)` returns `worktreeDir` or
`~/.worktree/worktrees/<project>`. `save_settings` and
`save_local_settings` write the project files.

## Git

`worktree.git` wraps the `git` command: `is_git_repo`, `get_repo_root`,
`get_main_repo_root` (the main working tree even from a linked worktree),
`get_main_project_name`, `branch_exists`, `create_worktree(path, branch)`,
`remove_worktree(original_dir, worktree_dir, force)` and
`get_latest_commit_date(worktree_dir)`.

## Lifecycle scripts

`worktree.runner.build_env_vars(state)` builds the environment given to
scripts:

- `WORKTREE_NAME`, `WORKTREE_DISPLAY_NAME`, `WORKTREE_PROJECT`
- `WORKTREE_DIR`, `WORKTREE_ORIGINAL_DIR`, `WORKTREE_ALLOCATION_KEY`
- `WORKTREE_PARAM` (when the state has a param)
- `WORKTREE_PORT_0`, `WORKTREE_PORT_1`, ... one for each port

`execute_script(script, env)` runs a script with bash from the worktree
root, raising `ScriptError` if it is missing, not executable or fails;
`execute_script_ignore_errors` only reports success.

## Finding worktrees

`worktree.registry` searches `~/.worktree/worktrees` for `state.json` files
up to three levels deep:

- `find_all_worktrees()` – newest first
- `get_current_project()` – from the enclosing worktree or git repository
- `find_worktrees_for_current_project()`
- `select_worktree(worktrees, action)` – numbered prompt on the terminal
- `resolve_worktree(name, interactive, action)` – by name (current project
  first, then all), else the current worktree, else a prompt

## Terminals and tmux

`worktree.terminal.Terminal` lists tmux, Terminal.app, iTerm2, Warp,
Ghostty, VS Code, GNOME Terminal, Konsole, Xfce Terminal, Kitty and
Alacritty. `Terminal.parse(text)` accepts names such as `iterm`, `code` or
`gnome`; `detect_terminal()` looks at `TERM_PROGRAM` and then at installed
programs. `launch(terminal, directory)` opens a window;
`launch_tmux_session(project, name, directory)` creates and attaches to (or
switches to) a session named `<project>-<name>`. There are also
`kill_tmux_session`, `rename_tmux_session`, `tmux_session_exists` and
`get_manual_command(directory)`.

## Command functions

`worktree.commands` holds functions that carry out single actions and print
their results:

- `commands.run.execute()` / `commands.stop.execute()` – run
  `.worktree/run.sh` or `.worktree/stop.sh` of the current worktree
- `commands.status.execute(name)` – print a worktree's details
  (`format_status(state)` returns the same text)
- `commands.opener.execute(name, interactive)` – open a worktree in the
  configured or detected terminal
- `commands.rename.execute(new_name, worktree, clear)` – set or clear a
  display name (at most 64 bytes, no `/` or `\`, not used by another
  worktree), renaming a matching tmux session too

## What this package does not do

- It installs no `worktree` command; the functions above are called from
  Python.
- It does not allocate ports. States hold whatever ports they are given,
  and nothing reads or updates `~/.worktree/port-allocations.json`.
- It does not create, close, list or clean up worktrees as a whole
  (generating a name, registering ports, running `setup.sh` or `close.sh`),
  nor initialise a project's `.worktree/` directory or write its scripts.