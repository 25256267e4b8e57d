"""DitLoop configuration

Configuration groups:
- tmux: multiplexer binary and session defaults
- layout: percentage bounds and resize step
- IPC: socket location and per-connection backpressure
- persistence: where the layout blob lives
- logging
"""

import os
import tempfile
from pathlib import Path

# === tmux ===
TMUX_BINARY = os.environ.get("DITLOOP_TMUX_BINARY", "tmux")
DEFAULT_SESSION_NAME = "ditloop"
TERMINAL_SPLIT_PERCENT = 50  # extra terminals split the active pane in half
COLLAPSED_PANE_WIDTH = 1  # cells left to a hidden or 0% preset pane

# === Layout ===
MIN_PANEL_PERCENT = 5.0
MAX_PANEL_PERCENT = 95.0
MIN_BOTTOM_BAR_PERCENT = 3.0
MAX_BOTTOM_BAR_PERCENT = 30.0
RESIZE_STEP = 5  # percentage points per +/- key press

# === IPC ===
IPC_SOCKET_DIR = Path(os.environ.get("DITLOOP_IPC_DIR", tempfile.gettempdir()))
IPC_SOCKET_PREFIX = "ditloop-"
IPC_READ_CHUNK = 4096
IPC_MAX_WRITE_BUFFER = 1024 * 1024  # peers that fall this far behind are dropped

# === Persistence ===
CONFIG_DIR = Path(os.environ.get("DITLOOP_CONFIG_DIR", Path.home() / ".ditloop"))
LAYOUT_FILE = "layout.json"

# === Fallback shell ===
DEFAULT_SHELL = "/bin/sh"
WORKSPACE_ENV_VAR = "DITLOOP_WORKSPACE"
PROFILE_ENV_VAR = "DITLOOP_PROFILE"

# === Logging ===
LOG_LEVEL = os.environ.get("DITLOOP_LOG_LEVEL", "INFO")

