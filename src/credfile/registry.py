"""Builder for OCI registry authentication files.

Tools such as helm and apko ship ``login`` commands that write registry
credentials to disk, where they tend to get cached by build systems.
Generating the authentication file up front, and mounting it as a secret,
avoids that. The file follows the ``containers-auth.json`` shape::

    {"auths":{"docker.io":{"auth":"YmF0bWFuOmM4SDk2WURSRU5pYk1RPT0="}}}

where each ``auth`` value is ``base64(username:password)``.

:class:`RegistryLogin` is immutable; :meth:`RegistryLogin.with_auth`
returns a new instance. Unlike :class:`~credfile.netrc.AutoLogin`, entries
are keyed by hostname, so adding credentials for a hostname that already
has some replaces them.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from credfile.config import _atomic_write
from credfile.exceptions import InvalidUsageError, SecretError
from credfile.models import RegistryAuth
from credfile.secret.base import SecretHandle
from credfile.secret.materializer import materialize
from credfile.secret.sources import NamedSecret
from credfile.secret.store import SecretStore

logger = logging.getLogger(__name__)

REGISTRY_FILE_MODE = 0o644
DEFAULT_SECRET_PREFIX = "oci-config"


def extract_registry_host(reference: str) -> str:
    """Return the registry host from a repository reference.

    An optional ``oci://`` scheme is dropped and everything from the first
    ``/`` onwards is discarded.

    Example::

        >>> extract_registry_host("oci://ghcr.io/purpleclay/charts")
        'ghcr.io'

    Raises:
        InvalidUsageError: If the reference has no path component.
    """
    ref = reference.removeprefix("oci://")
    host, sep, _ = ref.partition("/")
    if not sep or not host:
        raise InvalidUsageError(
            f"Malformed registry '{reference}', could not extract host"
        )
    return host


def encode_auth(username: str, password: str) -> str:
    """Return ``base64(username:password)`` using the standard alphabet."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


class RegistryLogin(BaseModel):
    """A hostname-keyed map of registry credentials.

    Attributes:
        entries: ``(hostname, credential)`` pairs in insertion order, one
            per hostname (e.g. ``docker.io``) or namespace (e.g.
            ``quay.io/user/image``).
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[tuple[str, RegistryAuth], ...] = ()

    @property
    def auths(self) -> Mapping[str, RegistryAuth]:
        """Read-only view of the credentials keyed by hostname."""
        return MappingProxyType(dict(self.entries))

    @classmethod
    def new(cls) -> RegistryLogin:
        """Create an empty registry authentication map."""
        return cls()

    def with_auth(self, hostname: str, username: str, password: SecretHandle) -> RegistryLogin:
        """Add credentials for a registry, replacing any for the same hostname.

        Args:
            hostname: The registry hostname (e.g. ``docker.io``) or
                namespace (e.g. ``quay.io/user/image``).
            username: The user to authenticate as.
            password: The user's password or token.

        Returns:
            A new map with the entry for *hostname* set.

        Raises:
            InvalidUsageError: If *hostname* or *username* is empty.
            SecretError: If the password cannot be resolved.
        """
        if not hostname:
            raise InvalidUsageError("Missing registry hostname")
        if not username:
            raise InvalidUsageError(f"Missing username for registry '{hostname}'")
        try:
            passwd = password.plaintext()
        except SecretError as exc:
            raise SecretError(
                f"Cannot resolve password for registry '{hostname}': {exc}"
            ) from exc

        auths = dict(self.entries)
        if hostname in auths:
            logger.debug("Replacing registry credentials for %s", hostname)
        auths[hostname] = RegistryAuth(auth=encode_auth(username, passwd))
        return self.model_copy(update={"entries": tuple(auths.items())})

    def render(self) -> str:
        """Render the map as compact JSON with hostnames in sorted order.

        Returns:
            ``{"auths":{...}}`` with no insignificant whitespace. An empty
            map renders as ``{"auths":{}}``.
        """
        document = {
            "auths": {host: {"auth": entry.auth} for host, entry in self.entries}
        }
        return json.dumps(document, separators=(",", ":"), sort_keys=True, ensure_ascii=False)

    def __str__(self) -> str:
        return self.render()

    def as_file(self, path: Union[str, Path]) -> Path:
        """Write the rendered JSON to *path* with ``0o644`` permissions.

        Returns:
            The written path.
        """
        target = Path(path).expanduser()
        _atomic_write(target, self.render(), mode=REGISTRY_FILE_MODE)
        logger.debug("Wrote registry auth file %s", target)
        return target

    def as_secret(
        self,
        name: Optional[str] = None,
        store: Optional[SecretStore] = None,
        prefix: str = DEFAULT_SECRET_PREFIX,
    ) -> NamedSecret:
        """Store the rendered JSON as a named secret.

        Args:
            name: Explicit secret name. Defaults to ``oci-config-<md5>``,
                where the hash is taken over the rendered JSON.
            store: Target store. Defaults to the user's store.
            prefix: Prefix for the derived name.

        Returns:
            A handle resolving to the rendered JSON.
        """
        return materialize(self.render(), prefix, name=name, store=store)
