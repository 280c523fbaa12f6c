"""Converter configuration file management.

Reads the optional .teamcity_report_config JSON file holding escaping and
end-of-input options.  Missing keys, a missing file or an unreadable file
all fall back to ``DEFAULT_CONFIG``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from teamcity_report.reporting.escaper import ESCAPE_MODES, LEGACY

DEFAULT_CONFIG_PATH = Path(".teamcity_report_config")

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "escape_mode": LEGACY,
    "flush_unterminated": False,
    "unterminated_package_name": "(unterminated)",
}


class ConverterConfig:
    """Manages the .teamcity_report_config JSON configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            text = self.path.read_text()
            data = json.loads(text)
            if isinstance(data, dict):
                self._data = {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError):
            self._data = dict(DEFAULT_CONFIG)

    @property
    def escape_mode(self) -> str:
        """Get the ``|0xHHHH`` escape mode (``legacy`` or ``codepoint``)."""
        mode = self._data.get("escape_mode", DEFAULT_CONFIG["escape_mode"])
        if not isinstance(mode, str) or mode not in ESCAPE_MODES:
            raise ValueError(f"Unknown escape mode: {mode}")
        return str(mode)

    @property
    def flush_unterminated(self) -> bool:
        """Whether results of a package with no summary line are reported."""
        return bool(
            self._data.get(
                "flush_unterminated", DEFAULT_CONFIG["flush_unterminated"]
            )
        )

    @property
    def unterminated_package_name(self) -> str:
        """Get the suite name used for a package with no summary line."""
        return str(
            self._data.get(
                "unterminated_package_name",
                DEFAULT_CONFIG["unterminated_package_name"],
            )
        )

    def set_config(
        self,
        escape_mode: str | None = None,
        flush_unterminated: bool | None = None,
        unterminated_package_name: str | None = None,
    ) -> None:
        """Update configuration values."""
        if escape_mode is not None:
            if escape_mode not in ESCAPE_MODES:
                raise ValueError(f"Unknown escape mode: {escape_mode}")
            self._data["escape_mode"] = escape_mode
        if flush_unterminated is not None:
            self._data["flush_unterminated"] = flush_unterminated
        if unterminated_package_name is not None:
            self._data["unterminated_package_name"] = unterminated_package_name

    def validate(self) -> None:
        """Raise ValueError if any value is unusable."""
        mode = self._data.get("escape_mode")
        if not isinstance(mode, str) or mode not in ESCAPE_MODES:
            raise ValueError(f"Unknown escape mode: {mode}")
        flush = self._data.get("flush_unterminated")
        if not isinstance(flush, bool):
            raise ValueError(f"flush_unterminated must be a boolean, got {flush!r}")
        name = self._data.get("unterminated_package_name")
        if not isinstance(name, str) or not name:
            raise ValueError(
                f"unterminated_package_name must be a non-empty string, got {name!r}"
            )
