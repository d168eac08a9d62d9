"""
Persists Greenhouse session cookies between runs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ghstat.config.loader import APP_NAME, default_config_dir


class CookieStore:
    """
    JSON file of cookies in the per-user ghstat config directory.
    """

    def __init__(self, app_name: str = APP_NAME, config_dir: Path | None = None) -> None:
        self.app_name = app_name
        self.config_dir = config_dir or default_config_dir()

    @property
    def path(self) -> Path:
        return self.config_dir / f"{self.app_name}.json"

    def load(self) -> list[dict[str, Any]]:
        """
        Read saved cookies. Raises OSError or ValueError if none are usable.
        """

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise OSError(f"failed to open cookie store file {self.path}: {exc}") from exc

        data = json.loads(raw)
        if not isinstance(data, list) or not all(
            isinstance(item, dict) and "name" in item and "value" in item for item in data
        ):
            raise ValueError(f"failed to parse cookie store file {self.path}")
        return data

    def save(self, cookies: list[dict[str, Any]]) -> Path:
        """
        Write ``cookies`` to the store, creating the directory as needed.
        """

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(cookies, indent=2), encoding="utf-8")
        return self.path
