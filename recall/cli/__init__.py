"""Terminal front-end (`recall` command)."""
