"""Secret handles, the named secret store, and secret materialization.

This package models the one place where credfile touches sensitive input
and output:

- :class:`SecretHandle` -- abstract, resolvable reference to a secret.
- :func:`secret_from_source` -- parses ``env:``/``file:``/``prompt``/
  ``store:``/``literal:`` descriptors into handles.
- :class:`SecretStore` -- on-disk store of named secrets (``0o600``).
- :func:`materialize` -- saves a rendered credential file as a named,
  optionally content-addressed, secret.

Typical usage::

    from credfile.secret import secret_from_source

    password = secret_from_source("env:GITHUB_TOKEN")
    netrc = AutoLogin.new().with_login("github.com", "ci", password)
"""

from credfile.secret.base import SecretHandle
from credfile.secret.materializer import derive_secret_name, materialize
from credfile.secret.sources import (
    EnvSecret,
    FileSecret,
    LiteralSecret,
    NamedSecret,
    PromptSecret,
    secret_from_source,
)
from credfile.secret.store import SecretStore

__all__ = [
    "SecretHandle",
    "EnvSecret",
    "FileSecret",
    "LiteralSecret",
    "NamedSecret",
    "PromptSecret",
    "SecretStore",
    "derive_secret_name",
    "materialize",
    "secret_from_source",
]
