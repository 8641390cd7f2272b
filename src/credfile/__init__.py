"""credfile -- Generate and parse credential configuration files.

This package builds the two credential artifacts that build and deploy
tooling most often needs mounted at runtime:

* a ``.netrc`` auto-login configuration (machine/login/password triples),
  used by Git, curl, Go modules and friends, and
* an OCI registry authentication file (``{"auths": {...}}``), used by
  docker, helm, apko and other registry clients.

Both are assembled one credential at a time from secret handles, and
rendered as text, written to a file, or stored as a named secret whose
default name is derived from a hash of the content.

Typical usage::

    from credfile import AutoLogin, secret_from_source

    netrc = AutoLogin.new().with_login(
        "github.com", "batman", secret_from_source("env:GITHUB_TOKEN")
    )
    netrc.as_file("~/.netrc")

Modules:
    netrc: :class:`AutoLogin` builder and renderer.
    registry: :class:`RegistryLogin` builder and renderer.
    parser: Parser-combinator grammar for ``.netrc`` files.
    secret: Secret handles, named secret store, and materialization.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"

from credfile.netrc import AutoLogin  # noqa: E402
from credfile.registry import RegistryLogin  # noqa: E402
from credfile.secret import secret_from_source  # noqa: E402

__all__ = ["AutoLogin", "RegistryLogin", "secret_from_source", "__version__"]
