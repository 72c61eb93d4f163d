"""
Ledger configuration.

Settings can come from code, the environment, or the ``ledger`` section
of a YAML settings file:

```yaml
ledger:
  root_path: ~/projects/garden/.garden
  head_name: my-garden
  log_level: DEBUG
  structured_logs: true
  store_log: false
  selector_cache_log: false
```
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError
from .local.head_ref import HeadRef
from .logging_utils import LEDGER_LOGGER, configure_structured_logging, set_diagnostics

DEFAULT_APP_NAME = "garden"
DEFAULT_HEAD_NAME = "my-garden"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class LedgerConfig:
    """Configuration for a ledger store."""

    root_path: Path = field(default_factory=lambda: Path.cwd() / f".{DEFAULT_APP_NAME}")
    head_name: str = DEFAULT_HEAD_NAME
    log_level: str = "INFO"
    structured_logs: bool = False
    store_log: bool = False
    selector_cache_log: bool = False

    def __post_init__(self) -> None:
        self.root_path = Path(self.root_path).expanduser()

    @classmethod
    def for_working_directory(
        cls, cwd: Path | str, app_name: str = DEFAULT_APP_NAME, **kwargs: Any
    ) -> LedgerConfig:
        """Place the store in a hidden ``.<app_name>`` directory under ``cwd``."""
        return cls(root_path=Path(cwd) / f".{app_name}", **kwargs)

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Create config from environment variables."""
        defaults = cls()
        return cls(
            root_path=Path(os.environ.get("GARDEN_LEDGER_ROOT", str(defaults.root_path))),
            head_name=os.environ.get("GARDEN_LEDGER_HEAD", defaults.head_name),
            log_level=os.environ.get("GARDEN_LEDGER_LOG_LEVEL", defaults.log_level),
            structured_logs=_parse_bool(os.environ.get("GARDEN_LEDGER_STRUCTURED_LOGS", "false")),
            store_log=_parse_bool(os.environ.get("GARDEN_LEDGER_STORE_LOG", "false")),
            selector_cache_log=_parse_bool(os.environ.get("GARDEN_LEDGER_SELECTOR_CACHE_LOG", "false")),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> LedgerConfig:
        """Load the ``ledger`` section of a YAML settings file.

        A missing file or section yields the defaults.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        try:
            settings = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(str(path), e) from e

        if not isinstance(settings, dict):
            raise ConfigError(str(path), ValueError("settings file is not a mapping"))
        section = settings.get("ledger") or {}
        if not isinstance(section, dict):
            raise ConfigError(str(path), ValueError("'ledger' section is not a mapping"))

        defaults = cls()
        return cls(
            root_path=Path(section.get("root_path", defaults.root_path)),
            head_name=str(section.get("head_name", defaults.head_name)),
            log_level=str(section.get("log_level", defaults.log_level)),
            structured_logs=_parse_bool(section.get("structured_logs", False)),
            store_log=_parse_bool(section.get("store_log", False)),
            selector_cache_log=_parse_bool(section.get("selector_cache_log", False)),
        )

    def head_ref(self) -> HeadRef:
        """Validated head reference for ``head_name``.

        Raises:
            InvalidHeadRefError: If the name is outside [A-Za-z0-9_-]
        """
        return HeadRef(self.head_name)

    def configure_logging(self) -> logging.Logger:
        """Apply the log level, formatter and diagnostic switches to the ledger loggers."""
        level = logging.getLevelName(self.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        if self.structured_logs:
            ledger_logger = configure_structured_logging(level, LEDGER_LOGGER)
        else:
            ledger_logger = logging.getLogger(LEDGER_LOGGER)
            ledger_logger.setLevel(level)

        set_diagnostics(store_log=self.store_log, selector_cache_log=self.selector_cache_log)
        return ledger_logger
