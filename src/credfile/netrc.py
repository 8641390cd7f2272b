"""Builder for ``.netrc`` auto-login configuration files.

A ``.netrc`` file lets tools such as Git authenticate against a remote
machine transparently, which makes private repositories painless to use
from build environments. The generated file can (and should) be mounted
as a dedicated secret rather than baked into an image.

:class:`AutoLogin` is immutable. Every ``with_*`` method returns a new
instance and leaves the receiver untouched, so calls chain naturally and
an intermediate instance can be reused as a branch point::

    base = AutoLogin.new().with_login("github.com", "batman", github_token)
    ci = base.with_file("ci.netrc")
    dev = base.with_login("gitlab.com", "joker", gitlab_token)

Secrets are resolved the moment a login is added. If resolution fails, or
an ingested file does not parse, the error propagates and no record is
added.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from credfile.config import _atomic_write
from credfile.exceptions import ConfigError, InvalidUsageError, SecretError
from credfile.models import LoginRecord, NetrcFormat
from credfile.parser import parse_auto_login
from credfile.secret.base import SecretHandle
from credfile.secret.materializer import materialize
from credfile.secret.sources import NamedSecret
from credfile.secret.store import SecretStore

logger = logging.getLogger(__name__)

NETRC_FILE_MODE = 0o600
DEFAULT_SECRET_PREFIX = "netrc"


def _check_token(value: str, field: str, machine: Optional[str] = None) -> str:
    """Reject values that would produce an unparseable ``.netrc`` file.

    The value itself never appears in the error message.
    """
    where = f" for machine '{machine}'" if machine else ""
    if not value:
        raise InvalidUsageError(f"Missing {field}{where}")
    if any(ch.isspace() for ch in value):
        raise InvalidUsageError(f"The {field}{where} must not contain whitespace")
    return value


def _resolve(value: Union[str, SecretHandle], field: str, machine: str) -> str:
    if not isinstance(value, SecretHandle):
        return value
    try:
        return value.plaintext()
    except SecretError as exc:
        raise SecretError(
            f"Cannot resolve {field} for machine '{machine}': {exc}"
        ) from exc


def _compact(record: LoginRecord) -> str:
    return f"machine {record.machine} login {record.username} password {record.password}\n"


def _full(record: LoginRecord) -> str:
    return f"machine {record.machine}\nlogin {record.username}\npassword {record.password}\n"


_RENDERERS = {
    NetrcFormat.COMPACT: _compact,
    NetrcFormat.FULL: _full,
}


class AutoLogin(BaseModel):
    """An ordered list of auto-login records and the format to render them in.

    Records keep their append order through rendering and re-parsing; they
    are never sorted or deduplicated.

    Attributes:
        records: The resolved login records, in append order.
        format: Rendering layout. Has no effect on parsing.
    """

    model_config = ConfigDict(frozen=True)

    records: tuple[LoginRecord, ...] = ()
    format: NetrcFormat = NetrcFormat.COMPACT

    @classmethod
    def new(cls, format: Union[NetrcFormat, str] = NetrcFormat.COMPACT) -> AutoLogin:
        """Create an empty configuration.

        Args:
            format: ``"compact"`` (default) or ``"full"``.

        Raises:
            InvalidUsageError: If *format* is not a known format.
        """
        try:
            fmt = NetrcFormat(format)
        except ValueError:
            allowed = ", ".join(f.value for f in NetrcFormat)
            raise InvalidUsageError(
                f"Unknown netrc format '{format}' (expected one of: {allowed})"
            ) from None
        return cls(format=fmt)

    # ------------------------------------------------------------------ #
    # Mutations (each returns a new instance)
    # ------------------------------------------------------------------ #

    def with_login(
        self,
        machine: str,
        username: Union[str, SecretHandle],
        password: SecretHandle,
    ) -> AutoLogin:
        """Add a login for a remote machine.

        Args:
            machine: The remote machine name, e.g. ``"github.com"``.
            username: The user on the remote machine, either as plain text
                or as a secret handle.
            password: A token (or password) for the user.

        Returns:
            A new configuration with the record appended.

        Raises:
            InvalidUsageError: If a value is empty or contains whitespace.
            SecretError: If the username or password cannot be resolved.
        """
        _check_token(machine, "machine")
        passwd = _resolve(password, "password", machine)
        uname = _resolve(username, "login", machine)
        record = LoginRecord(
            machine=machine,
            username=_check_token(uname, "login", machine),
            password=_check_token(passwd, "password", machine),
        )
        logger.debug("Added auto-login for machine %s", machine)
        return self.model_copy(update={"records": self.records + (record,)})

    def with_contents(self, text: str) -> AutoLogin:
        """Append every record parsed from an existing configuration.

        Args:
            text: Contents of an auto-login configuration file.

        Returns:
            A new configuration with the parsed records appended after the
            existing ones, in document order.

        Raises:
            ParseError: If *text* is not a valid configuration. Nothing is
                appended in that case.
        """
        records = parse_auto_login(text)
        logger.debug("Loaded %d auto-login record(s)", len(records))
        return self.model_copy(update={"records": self.records + tuple(records)})

    def with_file(self, path: Union[str, Path]) -> AutoLogin:
        """Append every record from an existing configuration file.

        Raises:
            ConfigError: If the file cannot be read or is not valid UTF-8.
            ParseError: If the file is not a valid configuration.
        """
        file_path = Path(path).expanduser()
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ConfigError(f"Auto-login file {file_path} is not valid UTF-8") from None
        except OSError as exc:
            raise ConfigError(f"Cannot read auto-login file {file_path}: {exc}") from exc
        return self.with_contents(text)

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render(self) -> str:
        """Render the configuration as ``.netrc`` text.

        Returns:
            One line (compact) or three lines (full) per record, without a
            trailing newline. An empty configuration renders as ``""``.
        """
        render_record = _RENDERERS[self.format]
        return "".join(render_record(r) for r in self.records).strip()

    def __str__(self) -> str:
        return self.render()

    def as_file(self, path: Union[str, Path]) -> Path:
        """Write the rendered configuration to *path* with ``0o600`` permissions.

        Returns:
            The written path.
        """
        target = Path(path).expanduser()
        _atomic_write(target, self.render(), mode=NETRC_FILE_MODE)
        logger.debug("Wrote auto-login file %s", target)
        return target

    def as_secret(
        self,
        name: Optional[str] = None,
        store: Optional[SecretStore] = None,
        prefix: str = DEFAULT_SECRET_PREFIX,
    ) -> NamedSecret:
        """Store the rendered configuration as a named secret.

        Args:
            name: Explicit secret name. Defaults to ``netrc-<md5>``, where
                the hash is taken over the rendered configuration.
            store: Target store. Defaults to the user's store.
            prefix: Prefix for the derived name.

        Returns:
            A handle resolving to the rendered configuration.
        """
        return materialize(self.render(), prefix, name=name, store=store)
