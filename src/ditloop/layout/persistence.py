"""Layout persistence

File-backed load/save collaborator for the layout store:
- atomic write (temp + rename)
- schema validation on load (pydantic)
- missing, unreadable or invalid files are reported as absent
"""

import json
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from ..config import CONFIG_DIR, LAYOUT_FILE
from ..telemetry import get_logger, metrics
from .models import LayoutConfig

logger = get_logger(__name__)


class LayoutPersistence:
    """Save and load the panel layout as JSON.

    Args:
        config_dir: Directory holding layout.json (default ~/.ditloop)
    """

    def __init__(self, config_dir: Path | str | None = None):
        self._config_dir = Path(config_dir) if config_dir else CONFIG_DIR

    @property
    def path(self) -> Path:
        return self._config_dir / LAYOUT_FILE

    def load(self) -> LayoutConfig | None:
        """Load the persisted layout.

        Returns:
            The validated layout, or None if the file is missing, is not JSON
            or fails validation
        """
        path = self.path
        if not path.exists():
            logger.debug(f"[Persist] File not found: {path}")
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return LayoutConfig.model_validate(data)

        except json.JSONDecodeError as e:
            logger.warning(f"[Persist] Invalid JSON in {path}: {e}")
            metrics.inc("persist.error", {"op": "load", "reason": "json"})
            return None

        except ValidationError as e:
            logger.warning(f"[Persist] Layout failed validation ({e.error_count()} errors)")
            metrics.inc("persist.error", {"op": "load", "reason": "schema"})
            return None

        except OSError as e:
            logger.error(f"[Persist] Load failed: {e}")
            metrics.inc("persist.error", {"op": "load", "reason": "io"})
            return None

    def save(self, config: LayoutConfig) -> bool:
        """Write the layout atomically.

        Args:
            config: Layout to persist

        Returns:
            Whether the write succeeded
        """
        path = self.path
        try:
            payload = json.dumps(config.to_json_dict(), indent=2).encode("utf-8")
            path.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(prefix="ditloop_layout_", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(temp_path, path)
            except Exception:
                if os.path.exists(temp_path):
                    os.unlink(temp_path)
                raise

            logger.info(f"[Persist] Saved layout to {path}")
            return True

        except OSError as e:
            logger.error(f"[Persist] Save failed: {e}")
            metrics.inc("persist.error", {"op": "save"})
            return False
