"""Error types shared across the orchestration core."""


class DitloopError(Exception):
    """Base class for all DitLoop errors."""


class ExternalProcessError(DitloopError):
    """An external program (tmux, a shell) could not be run or exited non-zero.

    Attributes:
        command: The argv that was executed
        returncode: Exit status, or None when the process never started
        stderr: Captured standard error (stripped)
    """

    def __init__(self, command: list[str], returncode: int | None, stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"{' '.join(self.command)}: {detail}")
