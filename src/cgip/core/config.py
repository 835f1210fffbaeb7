"""core.config

Operator configuration: compiled-in defaults merged with ``config.toml``.

The file is plain TOML::

    model = "gpt-4"
    show_progress = false
    show_context = false
    markdown = false

Loading never fails on a partial or oddly typed file: each field falls back to
its default independently.  Only a file that is not TOML at all is an error.
Writes replace the whole file and are not atomic; concurrent writers against
the same directory may lose an update.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Callable
from enum import StrEnum
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from cgip.core.exceptions import (
    ConfigIOError,
    ConfigParseError,
    InvalidConfigKeyError,
    InvalidConfigValueError,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = 'config.toml'
APP_DIR_NAME = 'cgip'

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class AppConfig(BaseModel):
    """Fully-resolved configuration; every field always has a value."""

    model: str = 'gpt-4'
    show_progress: bool = False
    show_context: bool = False
    markdown: bool = False

    model_config = ConfigDict(frozen=True, strict=True)

    @field_validator('*', mode='wrap')
    @classmethod
    def _fallback_to_default(cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        """Replace a wrong-typed value with the field default instead of failing."""
        try:
            return handler(value)
        except ValidationError:
            default = cls.model_fields[info.field_name].default
            logger.warning('Ignoring invalid value %r for %s, using default %r', value, info.field_name, default)
            return default


class ConfigKey(StrEnum):
    model = 'model'
    show_progress = 'show_progress'
    show_context = 'show_context'
    markdown = 'markdown'

    @classmethod
    def parse(cls, raw: str) -> ConfigKey:
        try:
            return cls(raw)
        except ValueError as exc:
            raise InvalidConfigKeyError(f'Invalid configuration key: {raw!r}') from exc


def _parse_bool(raw: str) -> bool:
    # Case-sensitive; "True", "1" and "yes" are rejected.
    if raw == 'true':
        return True
    if raw == 'false':
        return False
    raise ValueError(raw)


def _format_value(value: str | bool) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return value


_PARSERS: dict[ConfigKey, Callable[[str], str | bool]] = {
    ConfigKey.model: str,
    ConfigKey.show_progress: _parse_bool,
    ConfigKey.show_context: _parse_bool,
    ConfigKey.markdown: _parse_bool,
}


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def default_config_dir() -> Path:
    """Return ``$XDG_CONFIG_HOME/cgip``, falling back to ``~/.config/cgip``."""
    base = os.environ.get('XDG_CONFIG_HOME') or Path.home() / '.config'
    return Path(base) / APP_DIR_NAME


def config_path(directory: Path) -> Path:
    return directory / CONFIG_FILE_NAME


def _write(path: Path, config: AppConfig) -> None:
    try:
        path.write_text(tomli_w.dumps(config.model_dump()), encoding='utf-8')
    except OSError as exc:
        raise ConfigIOError(f'Failed to write config file {path}: {exc}') from exc


def ensure_file(directory: Path) -> Path:
    """Create *directory* and a default ``config.toml`` unless one already exists.

    An existing file is never touched, whatever it contains.
    """
    path = config_path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigIOError(f'Failed to create config directory {directory}: {exc}') from exc

    if not path.exists():
        logger.debug('Writing default config to %s', path)
        _write(path, AppConfig())
    return path


def load(directory: Path) -> AppConfig:
    """Merge ``config.toml`` in *directory* over the defaults.

    A missing file yields the defaults.

    Raises
    ------
    ConfigParseError
        If the file exists but is not valid UTF-8 TOML.
    ConfigIOError
        If the file exists but cannot be read.

    """
    path = config_path(directory)
    if not path.exists():
        return AppConfig()

    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ConfigIOError(f'Failed to read config file {path}: {exc}') from exc

    try:
        data = tomllib.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigParseError(f'Failed to parse config file {path}: {exc}') from exc

    logger.debug('Loaded config from %s', path)
    return AppConfig.model_validate(data)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class ConfigResolver:
    """Holds the configuration for one directory and persists changes to it."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory: Path = directory if directory is not None else default_config_dir()
        ensure_file(self.directory)
        self.config: AppConfig = load(self.directory)

    @property
    def path(self) -> Path:
        return config_path(self.directory)

    def get_value(self, key: str) -> str:
        """Return the canonical string form of *key*'s current value."""
        field = ConfigKey.parse(key)
        return _format_value(getattr(self.config, field.value))

    def set_value(self, key: str, raw_value: str) -> AppConfig:
        """Parse *raw_value* for *key*, update the config and rewrite the file.

        The file is reloaded first so that the written structure is the full
        merge of defaults, on-disk values and this change.
        """
        field = ConfigKey.parse(key)
        try:
            value = _PARSERS[field](raw_value)
        except ValueError as exc:
            raise InvalidConfigValueError(f'Invalid value for {field}: {raw_value!r}') from exc

        path = ensure_file(self.directory)
        current = load(self.directory)
        self.config = current.model_copy(update={field.value: value})
        logger.debug('Setting %s=%r in %s', field, value, path)
        _write(path, self.config)
        return self.config

    def __repr__(self) -> str:  # pragma: no cover - cosmetic
        return f'<{self.__class__.__name__} directory={str(self.directory)!r}>'
