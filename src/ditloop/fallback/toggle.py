"""Toggle mode - plain shell fallback when tmux is unavailable

The fallback must never crash the host process: the availability probe
never raises and a failed spawn resolves to exit code 1.
"""

import asyncio
import os
import shutil
from dataclasses import dataclass, field

from ..config import DEFAULT_SHELL, PROFILE_ENV_VAR, TMUX_BINARY, WORKSPACE_ENV_VAR
from ..telemetry import get_logger

logger = get_logger(__name__)


@dataclass
class ToggleShellOptions:
    """Options for spawn_toggle_shell().

    Attributes:
        workspace_path: Directory the shell starts in
        profile_name: Git profile exported as DITLOOP_PROFILE
        env: Extra environment variables
    """

    workspace_path: str
    profile_name: str | None = None
    env: dict[str, str] = field(default_factory=dict)


async def check_tmux_available(binary: str = TMUX_BINARY) -> bool:
    """Check whether tmux is installed and runnable.

    Returns:
        True if the binary is on PATH and `tmux -V` succeeds
    """
    path = shutil.which(binary)
    if path is None:
        return False
    try:
        proc = await asyncio.create_subprocess_exec(
            path,
            "-V",
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        return await proc.wait() == 0
    except OSError as e:
        logger.debug(f"[Toggle] tmux probe failed: {e}")
        return False


def build_shell_env(options: ToggleShellOptions) -> dict[str, str]:
    """Environment for the fallback shell."""
    env = dict(os.environ)
    env[WORKSPACE_ENV_VAR] = options.workspace_path
    env.update(options.env)
    if options.profile_name:
        env[PROFILE_ENV_VAR] = options.profile_name
    return env


async def spawn_toggle_shell(options: ToggleShellOptions) -> int:
    """Run the user's shell in the workspace with inherited stdio.

    There is no timeout; the caller cancels by terminating the child.

    Returns:
        The shell's exit code, or 1 if it could not be started
    """
    shell = os.environ.get("SHELL") or DEFAULT_SHELL
    try:
        proc = await asyncio.create_subprocess_exec(
            shell,
            cwd=options.workspace_path,
            env=build_shell_env(options),
        )
    except (OSError, ValueError) as e:
        logger.error(f"[Toggle] Could not start {shell}: {e}")
        return 1

    logger.info(f"[Toggle] Shell {shell} started in {options.workspace_path} (pid {proc.pid})")
    return await proc.wait()
