"""Netrc commands -- build and inspect ``.netrc`` auto-login files.

Provides the ``credfile netrc`` sub-command group. ``build`` assembles a
configuration from existing files and individual logins, then prints it,
writes it to disk, or stores it as a named secret. ``inspect`` parses a
file and lists its machines without revealing passwords.
"""

from __future__ import annotations

from typing import Optional

import typer

from credfile.output import print_data, print_table, success


netrc_app = typer.Typer(no_args_is_help=True)


@netrc_app.command("build")
def netrc_build(
    files: Optional[list[str]] = typer.Option(
        None, "--file", help="Existing .netrc file to merge (repeatable)."
    ),
    logins: Optional[list[str]] = typer.Option(
        None,
        "--login",
        help="MACHINE=USER=SOURCE, where SOURCE is env:VAR, file:PATH, prompt, "
        "store:NAME or literal:VALUE (repeatable).",
    ),
    format: Optional[str] = typer.Option(
        None, "--format", help="Output format: compact or full."
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the file here (mode 0600)."
    ),
    as_secret: bool = typer.Option(
        False, "--secret", help="Store as a named secret and print its name."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", help="Secret name (default: netrc-<md5 of content>)."
    ),
) -> None:
    """Build a .netrc auto-login configuration.

    Files are merged first, in the order given, followed by each
    ``--login`` in the order given. Secrets are resolved as each login
    is added; any failure aborts the build without output.

    Example::

        credfile netrc build --login github.com=batman=env:GITHUB_TOKEN
        credfile netrc build --file ~/.netrc --format full -o ./netrc
        credfile netrc build --login gitlab.com=joker=file:./token --secret
    """
    from credfile.commands import split_entry
    from credfile.config import resolve_config
    from credfile.exceptions import InvalidUsageError
    from credfile.netrc import AutoLogin
    from credfile.secret import secret_from_source

    if output_path and as_secret:
        raise InvalidUsageError("--output and --secret cannot be used together")
    if name and not as_secret:
        raise InvalidUsageError("--name requires --secret")

    config = resolve_config(cli_format=format)
    netrc = AutoLogin.new(config.netrc.format)

    for path in files or []:
        netrc = netrc.with_file(path)
    for entry in logins or []:
        machine, username, source = split_entry(entry, "--login")
        netrc = netrc.with_login(machine, username, secret_from_source(source))

    if output_path:
        written = netrc.as_file(output_path)
        success(f"Wrote {len(netrc.records)} login(s) to {written}")
    elif as_secret:
        secret = netrc.as_secret(name=name, prefix=config.netrc.secret_prefix)
        print_data(secret.name)
    else:
        print_data(netrc.render())


@netrc_app.command("inspect")
def netrc_inspect(
    path: str = typer.Argument(help="Path to a .netrc file."),
) -> None:
    """List the machines and logins in a .netrc file.

    Passwords are always masked. Exits with code 7 if the file cannot be
    parsed.

    Example::

        credfile netrc inspect ~/.netrc
        credfile --json netrc inspect ~/.netrc
    """
    from credfile.netrc import AutoLogin

    netrc = AutoLogin.new().with_file(path)
    rows = [[r.machine, r.username, "********"] for r in netrc.records]
    print_table(["Machine", "Login", "Password"], rows, title=path)
