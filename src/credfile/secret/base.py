"""Abstract base class for secret handles.

A :class:`SecretHandle` is an opaque reference to a sensitive value. It has
exactly one operation, :meth:`~SecretHandle.plaintext`, which resolves the
reference and may fail. Builders in :mod:`credfile.netrc` and
:mod:`credfile.registry` call it as the very last step before a value
becomes part of a configuration, so a failed resolution never leaves a
half-built record behind.

To implement a new secret source, subclass :class:`SecretHandle` and
implement :meth:`~SecretHandle.plaintext` and :meth:`~SecretHandle.describe`.

See Also:
    :mod:`credfile.secret.sources` for the built-in handles.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SecretHandle(ABC):
    """An opaque, resolvable reference to a secret value.

    Handles never reveal their value through ``repr()`` or ``str()``; both
    return :meth:`describe`, which names where the value comes from.
    """

    @abstractmethod
    def plaintext(self) -> str:
        """Resolve the handle to its plaintext value.

        Returns:
            The secret value.

        Raises:
            SecretError: If the value cannot be resolved.
        """
        ...

    @abstractmethod
    def describe(self) -> str:
        """Return a non-sensitive description of the handle's origin.

        Returns:
            A short string such as ``"env:GITHUB_TOKEN"``.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()!r})"

    def __str__(self) -> str:
        return self.describe()
