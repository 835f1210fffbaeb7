"""core.exceptions

Centralised exception hierarchy for *cgip*.

Every failure in the core is raised as a subclass of :class:`CgipError` and
propagated to the caller.  Front ends decide whether a condition ends the
process; library code never exits on its own.  Each error carries an
``exit_status`` so that a command-line front end can translate exceptions to
process exit codes without scattering that mapping through business code.
"""

from __future__ import annotations

from typing import ClassVar

# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


class CgipError(Exception):
    """Base class for all *cgip* domain errors."""

    #: Default process exit status if not overridden by subclass.
    exit_status: ClassVar[int] = 1

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class CredentialMissingError(CgipError):
    """Raised when no API credential is present in the environment."""

    exit_status: ClassVar[int] = 77  # EX_NOPERM


class NetworkFailureError(CgipError):
    """DNS, connection or timeout failure while talking to the endpoint."""

    exit_status: ClassVar[int] = 69  # EX_UNAVAILABLE


class MalformedResponseError(CgipError):
    """Response body matched neither schema, or the API reported an error.

    ``upstream_message`` holds the API's own message when the body was a
    well-formed error response, ``None`` when the body was unparseable.
    """

    exit_status: ClassVar[int] = 76  # EX_PROTOCOL

    def __init__(self, message: str | None = None, *, upstream_message: str | None = None) -> None:
        super().__init__(message)
        self.upstream_message = upstream_message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigError(CgipError):
    """Base class for configuration failures."""

    exit_status: ClassVar[int] = 78  # EX_CONFIG


class ConfigIOError(ConfigError):
    """The config directory or file could not be created, read or written."""

    exit_status: ClassVar[int] = 74  # EX_IOERR


class ConfigParseError(ConfigError):
    """The config file exists but is not valid TOML."""


class InvalidConfigKeyError(ConfigError):
    """A key outside the known configuration schema was requested."""

    exit_status: ClassVar[int] = 64  # EX_USAGE


class InvalidConfigValueError(ConfigError):
    """A raw value could not be parsed for its key's type."""

    exit_status: ClassVar[int] = 64  # EX_USAGE


# ---------------------------------------------------------------------------
# Transcript
# ---------------------------------------------------------------------------


class InvalidRoleError(CgipError, ValueError):
    """Raised for any role string other than system/user/assistant."""

    exit_status: ClassVar[int] = 65  # EX_DATAERR


class TranscriptDecodeError(CgipError):
    """Structured transcript text could not be decoded."""

    exit_status: ClassVar[int] = 65  # EX_DATAERR
