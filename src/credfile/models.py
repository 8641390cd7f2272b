"""Canonical Pydantic models shared across all credfile modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Credential models** -- the resolved entries that make up a rendered
artifact:
    :class:`NetrcFormat`, :class:`LoginRecord`, and :class:`RegistryAuth`.
    The builders that accumulate them live in :mod:`credfile.netrc` and
    :mod:`credfile.registry`.

**Configuration models** -- serialised as JSON in the user's config
directory:
    :class:`NetrcConfig`, :class:`RegistryConfig`, :class:`OutputConfig`,
    and :class:`GlobalConfig`.

Credential models are frozen. Fields holding plaintext or encoded secrets
are excluded from ``repr()`` so that they never end up in logs or
tracebacks.
"""

from __future__ import annotations

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# --- Credential models ---


class NetrcFormat(str, enum.Enum):
    """Textual layouts for a rendered auto-login configuration file.

    The format only affects rendering. Parsing accepts either layout (and
    any mix of the two) regardless of the format a configuration was
    created with.
    """

    COMPACT = "compact"
    """One line per record: ``machine <M> login <U> password <P>``."""

    FULL = "full"
    """Three lines per record: ``machine <M>`` / ``login <U>`` / ``password <P>``."""


class LoginRecord(BaseModel):
    """One resolved machine/login/password triple.

    Records only exist after secret resolution, so ``password`` always holds
    plaintext. It is never re-wrapped as a secret internally.
    """

    model_config = ConfigDict(frozen=True)

    machine: str = Field(description="The remote machine name")
    username: str = Field(description="A user on the remote machine")
    password: str = Field(repr=False, description="Token or password for the user")


class RegistryAuth(BaseModel):
    """A base64-encoded ``username:password`` credential for one registry."""

    model_config = ConfigDict(frozen=True)

    auth: str = Field(repr=False, description="base64(username:password)")


# --- Configuration models ---


class NetrcConfig(BaseModel):
    """Defaults for auto-login configuration files stored in :class:`GlobalConfig`."""

    format: NetrcFormat = Field(
        default=NetrcFormat.COMPACT, description="Output format: compact, full"
    )
    secret_prefix: str = Field(
        default="netrc", description="Prefix for content-addressed secret names"
    )


class RegistryConfig(BaseModel):
    """Defaults for registry authentication files stored in :class:`GlobalConfig`."""

    secret_prefix: str = Field(
        default="oci-config", description="Prefix for content-addressed secret names"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto",
        description="Output format used when neither --json nor --plain is given",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/credfile/config.json``.

    Loaded and saved by :func:`~credfile.config.load_global_config` and
    :func:`~credfile.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~credfile.config.resolve_config`
    for the full precedence chain.
    """

    netrc: NetrcConfig = Field(default_factory=NetrcConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
