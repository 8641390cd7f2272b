"""Turn rendered credential files into named secrets.

A rendered ``.netrc`` or registry authentication file is stored in the
:class:`~credfile.secret.store.SecretStore` under either an explicit name
or a *content-addressed* one, ``<prefix>-<md5 hex digest>``. The digest is
taken over the exact UTF-8 bytes of the rendered text, so identical
artifacts built independently always share a name and downstream
consumers can deduplicate them. Any change to record order, content, or
output format yields a different name.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional

from credfile.secret.sources import NamedSecret
from credfile.secret.store import SecretStore, validate_secret_name

logger = logging.getLogger(__name__)


def derive_secret_name(prefix: str, content: str) -> str:
    """Derive the content-addressed name for *content*.

    Args:
        prefix: Name prefix, e.g. ``"netrc"`` or ``"oci-config"``.
        content: The exact rendered artifact.

    Returns:
        ``f"{prefix}-{md5(content).hexdigest()}"``.

    Example::

        >>> derive_secret_name("netrc", "")
        'netrc-d41d8cd98f00b204e9800998ecf8427e'
    """
    digest = hashlib.md5(content.encode("utf-8")).hexdigest()
    return f"{prefix}-{digest}"


def materialize(
    content: str,
    prefix: str,
    name: Optional[str] = None,
    store: Optional[SecretStore] = None,
) -> NamedSecret:
    """Store *content* as a named secret and return a handle to it.

    Args:
        content: The rendered artifact to store verbatim.
        prefix: Prefix used to derive a name when *name* is not given.
        name: Explicit secret name, used verbatim when non-empty.
        store: Target store. Defaults to the user's store.

    Returns:
        A :class:`~credfile.secret.sources.NamedSecret` that resolves to
        *content*.

    Raises:
        InvalidUsageError: If the explicit or derived name is invalid.
    """
    secret_name = name if name else derive_secret_name(prefix, content)
    validate_secret_name(secret_name)
    target = store if store is not None else SecretStore()
    target.save(secret_name, content)
    logger.debug("Materialized secret %s", secret_name)
    return NamedSecret(secret_name, target)
