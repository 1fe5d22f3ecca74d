"""Single-action functions: run, stop, status, open and rename a worktree."""