"""Telemetry - logging and metrics entry point

Provides a logger factory and an in-process metrics facade.

Log format: [module] [Component] msg
Metric examples: tmux.error, ipc.dropped, ipc.malformed, persist.error
"""

import logging

from .config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once for a DitLoop process.

    Args:
        level: Level name; defaults to LOG_LEVEL (DITLOOP_LOG_LEVEL)
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=_LOG_FORMAT,
    )


def format_pane_log(component: str, pane_id: str, msg: str) -> str:
    """Format a log message tagged with a pane id.

    Args:
        component: Component tag (e.g. "Tmux")
        pane_id: Pane identifier
        msg: Log message

    Returns:
        "[component:pane_id] msg"
    """
    return f"[{component}:{pane_id or 'unknown'}] {msg}"


class Metrics:
    """In-process counters keyed by name and sorted labels."""

    def __init__(self):
        self._counters: dict[str, int] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """Increment a counter.

        Args:
            name: Metric name (e.g. "ipc.dropped")
            labels: Optional labels (e.g. {"cmd": "kill-pane"})
            value: Increment, default 1
        """
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        return self._counters.get(self._make_key(name, labels), 0)

    def reset(self) -> None:
        self._counters.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


metrics = Metrics()
