"""Persistent store of named secrets.

Stores each secret as a file in ``~/.local/share/credfile/secrets/<name>``
(XDG) or the platform-equivalent directory. Files are written atomically
via :func:`~credfile.config._atomic_write` with ``0o600`` permissions
applied before any content is written, so secrets are never
world-readable, even momentarily.

The store holds raw text: a materialized ``.netrc`` or registry
authentication file is saved byte-for-byte so that consumers can mount it
as-is.

See Also:
    :func:`~credfile.secret.materializer.materialize` -- writes rendered
    credential files into the store.
    :class:`~credfile.secret.sources.NamedSecret` -- resolves a stored
    secret back to plaintext.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

from credfile.config import _atomic_write, get_data_dir
from credfile.exceptions import InvalidUsageError, SecretError

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

SECRET_FILE_MODE = 0o600


def _secrets_dir() -> Path:
    """Return the secrets directory, creating it if needed."""
    path = get_data_dir() / "secrets"
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_secret_name(name: str) -> str:
    """Check that *name* is usable as a secret name.

    Names start with a letter or digit and contain only letters, digits,
    ``.``, ``_`` and ``-``, which keeps them inside the store directory.

    Returns:
        The name unchanged.

    Raises:
        InvalidUsageError: If the name is empty or contains other characters.
    """
    if not name or not _NAME_PATTERN.match(name):
        raise InvalidUsageError(
            f"Invalid secret name '{name}': use letters, digits, '.', '_' and '-' only"
        )
    return name


class SecretStore:
    """Read/write named secrets in a single directory.

    Args:
        root: Directory holding the secrets. Defaults to ``secrets/`` under
            the data directory.

    Example::

        store = SecretStore()
        store.save("netrc-ci", "machine github.com login ci password tok")
        assert store.load("netrc-ci").startswith("machine")
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = Path(root) if root is not None else _secrets_dir()

    @property
    def root(self) -> Path:
        """The directory holding the secret files."""
        return self._root

    def path_for(self, name: str) -> Path:
        """Return the file path backing the secret *name*."""
        return self._root / validate_secret_name(name)

    def save(self, name: str, value: str) -> Path:
        """Persist *value* under *name* atomically with ``0o600`` permissions.

        An existing secret with the same name is replaced.

        Returns:
            The path of the written file.

        Raises:
            InvalidUsageError: If *name* is not a valid secret name.
            OSError: If the file cannot be written.
        """
        path = self.path_for(name)
        _atomic_write(path, value, mode=SECRET_FILE_MODE)
        logger.debug("Stored secret %s (%d bytes)", name, len(value.encode("utf-8")))
        return path

    def load(self, name: str) -> str:
        """Return the value stored under *name*.

        Raises:
            SecretError: If no such secret exists or it cannot be read.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise SecretError(f"Secret '{name}' not found in store {self._root}")
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError:
            raise SecretError(f"Secret '{name}' is not valid UTF-8") from None
        except OSError as exc:
            raise SecretError(f"Cannot read secret '{name}': {exc}") from exc

    def exists(self, name: str) -> bool:
        """Check whether a secret called *name* is stored."""
        return self.path_for(name).is_file()

    def list_names(self) -> list[str]:
        """Return the names of all stored secrets, sorted alphabetically."""
        if not self._root.is_dir():
            return []
        return sorted(
            p.name
            for p in self._root.iterdir()
            if p.is_file() and _NAME_PATTERN.match(p.name)
        )

    def delete(self, name: str) -> None:
        """Delete the secret called *name*.

        Raises:
            SecretError: If no such secret exists.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise SecretError(f"Secret '{name}' not found in store {self._root}")
        path.unlink()
        logger.debug("Deleted secret %s", name)
