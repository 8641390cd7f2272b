"""Secrets commands -- manage the named secret store.

Provides the ``credfile secrets`` sub-command group for listing, printing,
and deleting secrets created with ``--secret`` (or stored for use with
``store:NAME`` sources).
"""

from __future__ import annotations

import typer

from credfile.output import info, print_data, print_table, success


secrets_app = typer.Typer(no_args_is_help=True)


@secrets_app.command("list")
def secrets_list() -> None:
    """List the names of all stored secrets.

    Example::

        credfile secrets list
        credfile --json secrets list
    """
    from credfile.secret import SecretStore

    store = SecretStore()
    names = store.list_names()
    if not names:
        info(f"No secrets stored in {store.root}")
        return
    print_table(["Name"], [[n] for n in names], title="Secrets")


@secrets_app.command("show")
def secrets_show(
    name: str = typer.Argument(help="Secret name."),
) -> None:
    """Print a stored secret's content to stdout, unmodified.

    Example::

        credfile secrets show netrc-9a0364b9e99bb480dd25e1f0284c8555 > ~/.netrc
    """
    from credfile.secret import NamedSecret, SecretStore

    print_data(NamedSecret(name, SecretStore()).plaintext())


@secrets_app.command("delete")
def secrets_delete(
    ctx: typer.Context,
    name: str = typer.Argument(help="Secret name."),
) -> None:
    """Delete a stored secret.

    Asks for confirmation unless ``--force`` is active.

    Example::

        credfile secrets delete oci-login
        credfile --force secrets delete oci-login
    """
    from credfile.secret import SecretStore

    store = SecretStore()
    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm(f"Delete secret '{name}'?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    store.delete(name)
    success(f"Deleted secret '{name}'.")
