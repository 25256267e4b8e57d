"""Fallback module - runs without tmux"""

from .toggle import ToggleShellOptions, build_shell_env, check_tmux_available, spawn_toggle_shell

__all__ = [
    "ToggleShellOptions",
    "build_shell_env",
    "check_tmux_available",
    "spawn_toggle_shell",
]
