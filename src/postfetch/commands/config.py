"""Config commands -- view and modify the global configuration.

Provides the ``postfetch config`` group for reading, updating, and
resetting the user's :class:`~postfetch.models.GlobalConfig`, persisted
in the postfetch config directory.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from postfetch.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    effective: bool = typer.Option(
        False, "--effective", help="Show the merged config (env, project, flags)."
    ),
) -> None:
    """Show the current configuration.

    Example::

        postfetch config show
        postfetch --no-cache config show --effective --json
    """
    from postfetch.config import get_config_dir, load_global_config
    from postfetch.runtime import get_config

    config = get_config(ctx) if effective else load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


def coerce_value(current: object, value: str) -> object:
    """Coerce *value* to the type of the field's *current* value.

    Raises:
        ValueError: If a numeric field gets a non-numeric value.
    """
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes", "on")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key in dot notation, e.g. 'cache.backend'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type and the result is
    validated before it is saved.

    Example::

        postfetch config set upstream.base_url http://localhost:3000
        postfetch config set cache.ttl_seconds 600
        postfetch config set export.default_format docx
    """
    from postfetch.config import load_global_config, save_global_config
    from postfetch.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    *parents, final_key = key.split(".")
    target = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[part]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    try:
        target[final_key] = coerce_value(target[final_key], value)
    except ValueError:
        error(f"Expected a number for {key}, got: {value}")
        raise typer.Exit(code=2) from None

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {target[final_key]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset the configuration to defaults.

    Example::

        postfetch config reset --yes
    """
    from postfetch.config import save_global_config
    from postfetch.models import GlobalConfig

    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
