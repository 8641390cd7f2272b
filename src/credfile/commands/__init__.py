"""Built-in CLI sub-commands for credfile.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~credfile.commands.netrc` -- build and inspect ``.netrc`` files.
* :mod:`~credfile.commands.registry` -- build registry authentication files.
* :mod:`~credfile.commands.secrets` -- manage the named secret store.
* :mod:`~credfile.commands.config` -- view and modify global settings.

Each module exports a :class:`typer.Typer` sub-application registered on
the root app in :mod:`credfile.app`.
"""

from __future__ import annotations

from credfile.exceptions import InvalidUsageError


def split_entry(value: str, option: str) -> tuple[str, str, str]:
    """Split a ``TARGET=USER=SOURCE`` command-line entry.

    Only the first two ``=`` separate fields, so the secret source may
    itself contain ``=``.

    Raises:
        InvalidUsageError: If the entry does not have three non-empty parts.
    """
    parts = value.split("=", 2)
    if len(parts) != 3 or not all(parts):
        target = parts[0] if parts and parts[0] else "<missing>"
        raise InvalidUsageError(
            f"Invalid {option} entry for '{target}': expected TARGET=USER=SOURCE"
        )
    return parts[0], parts[1], parts[2]
