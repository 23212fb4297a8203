"""ConfigManager — global and per-tool settings backed by TOML files."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from site_toolbox.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_DIR = Path.home() / ".config" / "site-toolbox"

DEFAULTS: dict[str, Any] = {
    "url_prefix": "/images/",
    "codec": "pillow",
    "magick_binary": "magick",
}


class ConfigManager:
    """Layered configuration: built-in defaults, global file, per-tool file.

    Layout on disk::

        <config_dir>/config.toml           global settings
        <config_dir>/tools/<tool>.toml     overrides for one tool

    Args:
        config_dir: Root directory for configuration files.
                    Defaults to ``~/.config/site-toolbox/``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir or _DEFAULT_CONFIG_DIR
        self._global: dict[str, Any] = {}
        self._per_tool: dict[str, dict[str, Any]] = {}

    @property
    def config_dir(self) -> Path:
        """Return the configuration directory path."""
        return self._config_dir

    def load(self) -> None:
        """Load global and per-tool config from ``config_dir``.

        Missing files are silently skipped.

        Raises:
            ValidationError: If a file exists but is not valid TOML.
        """
        global_file = self._config_dir / "config.toml"
        if global_file.is_file():
            self._global = self._read_toml(global_file)
            logger.info("Loaded global config from %s", global_file)

        tools_dir = self._config_dir / "tools"
        if tools_dir.is_dir():
            for toml_file in sorted(tools_dir.glob("*.toml")):
                self._per_tool[toml_file.stem] = self._read_toml(toml_file)
                logger.info("Loaded config for tool '%s'", toml_file.stem)

    def get(self, key: str, *, tool: str | None = None, default: Any = None) -> Any:
        """Look a key up in the tool file, then the global file, then ``DEFAULTS``.

        Args:
            key: The configuration key.
            tool: If given, check the tool-specific config first.
            default: Fallback when the key is set nowhere, built-in defaults included.

        Returns:
            The configuration value, or *default*.
        """
        if tool and tool in self._per_tool:
            value = self._per_tool[tool].get(key)
            if value is not None:
                return value
        if key in self._global:
            return self._global[key]
        return DEFAULTS.get(key, default)

    def set_global(self, key: str, value: Any) -> None:
        """Set a global configuration value (in-memory only)."""
        self._global[key] = value

    @staticmethod
    def _read_toml(path: Path) -> dict[str, Any]:
        try:
            with path.open("rb") as fh:
                return tomllib.load(fh)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Config file '{path}' is not valid TOML: {exc}"
            raise ValidationError(msg) from exc
