"""Registry commands -- build OCI registry authentication files.

Provides the ``credfile registry`` sub-command group. The generated JSON
uses the ``{"auths": {...}}`` shape understood by docker, helm, apko and
other OCI tooling.
"""

from __future__ import annotations

from typing import Optional

import typer

from credfile.output import print_data, success


registry_app = typer.Typer(no_args_is_help=True)


@registry_app.command("build")
def registry_build(
    auths: Optional[list[str]] = typer.Option(
        None,
        "--auth",
        help="HOST=USER=SOURCE, where HOST may also be an oci://host/repo "
        "reference and SOURCE is env:VAR, file:PATH, prompt, "
        "store:NAME or literal:VALUE (repeatable).",
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the file here (mode 0644)."
    ),
    as_secret: bool = typer.Option(
        False, "--secret", help="Store as a named secret and print its name."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Secret name (default: oci-config-<md5 of content>)."
    ),
) -> None:
    """Build a registry authentication file.

    A later ``--auth`` for the same host replaces an earlier one. An
    ``oci://`` chart or image reference is reduced to its registry host.

    Example::

        credfile registry build --auth docker.io=batman=env:DOCKER_PASSWORD
        credfile registry build --auth ghcr.io=joker=file:./pat --secret --name oci-login
        credfile registry build --auth oci://ghcr.io/purpleclay/charts=joker=env:GHCR_TOKEN
    """
    from credfile.commands import split_entry
    from credfile.config import resolve_config
    from credfile.exceptions import InvalidUsageError
    from credfile.registry import RegistryLogin, extract_registry_host
    from credfile.secret import secret_from_source

    if output_path and as_secret:
        raise InvalidUsageError("--output and --secret cannot be used together")
    if name and not as_secret:
        raise InvalidUsageError("--name requires --secret")

    config = resolve_config()
    registry = RegistryLogin.new()
    for entry in auths or []:
        hostname, username, source = split_entry(entry, "--auth")
        if hostname.startswith("oci://"):
            hostname = extract_registry_host(hostname)
        registry = registry.with_auth(hostname, username, secret_from_source(source))

    if output_path:
        written = registry.as_file(output_path)
        success(f"Wrote {len(registry.auths)} registry credential(s) to {written}")
    elif as_secret:
        secret = registry.as_secret(name=name, prefix=config.registry.secret_prefix)
        print_data(secret.name)
    else:
        print_data(registry.render())
