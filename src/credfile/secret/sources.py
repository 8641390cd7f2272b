"""Built-in secret handles and the source descriptor parser.

Secrets can come from several places, selected with a *source descriptor*
string on the command line or in code:

- ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
- ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
- ``"prompt"`` -- prompts interactively (requires a TTY)
- ``"store:NAME"`` -- reads a named secret from the
  :class:`~credfile.secret.store.SecretStore`
- ``"literal:VALUE"`` -- uses ``VALUE`` verbatim (tests and throwaway tokens)

:func:`secret_from_source` turns a descriptor into the matching
:class:`~credfile.secret.base.SecretHandle`. Resolution is deferred until
:meth:`~credfile.secret.base.SecretHandle.plaintext` is called.
"""

from __future__ import annotations

import getpass
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from credfile.exceptions import InvalidUsageError, SecretError
from credfile.secret.base import SecretHandle

if TYPE_CHECKING:
    from credfile.secret.store import SecretStore


class LiteralSecret(SecretHandle):
    """A secret whose value is already known in memory."""

    def __init__(self, value: str) -> None:
        self._value = value

    def plaintext(self) -> str:
        return self._value

    def describe(self) -> str:
        return "literal:***"


class EnvSecret(SecretHandle):
    """A secret read from an environment variable at resolution time.

    Args:
        var_name: Name of the environment variable.
    """

    def __init__(self, var_name: str) -> None:
        self._var_name = var_name

    def plaintext(self) -> str:
        value = os.environ.get(self._var_name)
        if value is None:
            raise SecretError(
                f"Environment variable '{self._var_name}' is not set (source: {self.describe()})"
            )
        return value

    def describe(self) -> str:
        return f"env:{self._var_name}"


class FileSecret(SecretHandle):
    """A secret read from a file, with surrounding whitespace stripped.

    Args:
        path: Path to the file. ``~`` is expanded.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    def plaintext(self) -> str:
        if not self._path.is_file():
            raise SecretError(f"Secret file not found: {self._path} (source: {self.describe()})")
        try:
            return self._path.read_text(encoding="utf-8").strip()
        except UnicodeDecodeError:
            raise SecretError(f"Secret file {self._path} is not valid UTF-8") from None
        except OSError as exc:
            raise SecretError(f"Cannot read secret file {self._path}: {exc}") from exc

    def describe(self) -> str:
        return f"file:{self._path}"


class PromptSecret(SecretHandle):
    """A secret typed interactively by the user.

    Args:
        label: Text shown in the prompt.
    """

    def __init__(self, label: str = "Enter secret: ") -> None:
        self._label = label

    def plaintext(self) -> str:
        if not sys.stdin.isatty():
            raise SecretError("Cannot prompt for secret: stdin is not a TTY (source: prompt)")
        return getpass.getpass(self._label)

    def describe(self) -> str:
        return "prompt"


class NamedSecret(SecretHandle):
    """A secret held in the named secret store.

    This is also the handle returned when a rendered credential file is
    materialized as a secret, see
    :func:`~credfile.secret.materializer.materialize`.

    Args:
        name: The secret name.
        store: The store to read from. Defaults to the user's store under
            the data directory.
    """

    def __init__(self, name: str, store: Optional[SecretStore] = None) -> None:
        self._name = name
        self._store = store

    @property
    def name(self) -> str:
        """The secret's name in the store."""
        return self._name

    def plaintext(self) -> str:
        store = self._store
        if store is None:
            from credfile.secret.store import SecretStore

            store = SecretStore()
        return store.load(self._name)

    def describe(self) -> str:
        return f"store:{self._name}"


def secret_from_source(source: str, store: Optional[SecretStore] = None) -> SecretHandle:
    """Build a secret handle from its source descriptor.

    Args:
        source: The source descriptor string (see module docstring).
        store: Store used for ``store:`` descriptors.

    Returns:
        An unresolved :class:`~credfile.secret.base.SecretHandle`.

    Raises:
        InvalidUsageError: If the descriptor is empty or of an unknown kind.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        if not var_name:
            raise InvalidUsageError("Missing variable name in secret source 'env:'")
        return EnvSecret(var_name)

    if source.startswith("file:"):
        file_path = source[5:]
        if not file_path:
            raise InvalidUsageError("Missing path in secret source 'file:'")
        return FileSecret(file_path)

    if source == "prompt":
        return PromptSecret()

    if source.startswith("store:"):
        name = source[6:]
        if not name:
            raise InvalidUsageError("Missing secret name in secret source 'store:'")
        return NamedSecret(name, store)

    if source.startswith("literal:"):
        return LiteralSecret(source[8:])

    # Only the kind is echoed back; the descriptor may itself be a secret.
    kind = source.split(":", 1)[0] if ":" in source else "<bare value>"
    raise InvalidUsageError(
        f"Unknown secret source '{kind}' (expected env:, file:, prompt, store:, or literal:)"
    )
