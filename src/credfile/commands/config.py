"""Config commands -- view and modify global configuration.

Provides the ``credfile config`` sub-command group for reading,
updating, and resetting the user's global configuration file
(:class:`~credfile.models.GlobalConfig`). Settings are persisted in
the credfile config directory and control defaults such as the netrc
output format and the prefixes of content-addressed secret names.
"""

from __future__ import annotations

import typer

from credfile.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the configuration after applying project config and environment.",
    ),
) -> None:
    """Show current configuration.

    Example::

        credfile config show
        credfile --json config show --effective
    """
    from credfile.config import get_config_dir, load_global_config, resolve_config

    config = resolve_config() if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'netrc.format')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The updated config is validated
    against :class:`~credfile.models.GlobalConfig` before saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid or validation
            fails.

    Example::

        credfile config set netrc.format full
        credfile config set registry.secret_prefix registry-auth
    """
    from pydantic import ValidationError

    from credfile.config import load_global_config, save_global_config
    from credfile.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    # Navigate the dot-separated key path.
    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    target[final_key] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    ctx: typer.Context,
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is active.

    Example::

        credfile config reset
        credfile --force config reset
    """
    from credfile.config import save_global_config
    from credfile.models import GlobalConfig

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
