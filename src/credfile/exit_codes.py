"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~credfile.exceptions.CredfileError` subclass.
Pipelines that shell out to ``credfile`` can inspect the exit code to
tell a bad credential file apart from a missing secret without parsing
stderr.

Example::

    $ credfile netrc build --file ./broken.netrc
    $ echo $?
    7   # EXIT_PARSE_ERROR -- the auto-login file could not be parsed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required values."""

EXIT_SECRET_ERROR = 3
"""A secret could not be resolved to plaintext."""

EXIT_PARSE_ERROR = 7
"""An auto-login configuration file could not be parsed."""
