"""structval CLI entry point."""

import logging
import os
from pathlib import Path

import click

from structval.config import ValidatorConfig
from structval.types import UsageError
from structval.validator import Validator


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get("STRUCTVAL_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML validator config. Defaults to $STRUCTVAL_CONFIG or the standard set.",
)
@click.option(
    "--full-error-path",
    is_flag=True,
    default=False,
    help="Report nested failures with their full field path.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, full_error_path: bool, verbose: bool):
    """structval: declaration-driven field validation."""
    _configure_logging(verbose)
    try:
        if config_path is not None:
            config = ValidatorConfig.from_yaml(config_path)
        else:
            config = ValidatorConfig.from_env()
        if full_error_path:
            config.full_error_path = True
        ctx.obj = Validator(config)
    except UsageError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)


@cli.command()
@click.pass_obj
def rules(validator: Validator):
    """List installed rules and aliases."""
    click.echo("Rules:")
    for name in validator.registry.list_rules():
        click.echo(f"  {name}")

    aliases = validator.registry.list_aliases()
    if aliases:
        click.echo("\nAliases:")
        for name, tags in aliases.items():
            click.echo(f"  {name} = {','.join(str(t) for t in tags)}")


@cli.command()
@click.argument("declaration")
@click.pass_obj
def parse(validator: Validator, declaration: str):
    """Show the rule chain a DECLARATION resolves to."""
    try:
        tags = validator.parse_tags(declaration)
    except UsageError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    for i, tag in enumerate(tags, start=1):
        param = f" (param: {tag.param})" if tag.param else ""
        click.echo(f"{i}. {tag.name}{param}")


@cli.command()
@click.argument("value")
@click.option("-t", "--tags", "declaration", required=True, help="Declaration to check against.")
@click.option("-f", "--field", "field_name", default="value", show_default=True, help="Field name to report.")
@click.pass_obj
def check(validator: Validator, value: str, declaration: str, field_name: str):
    """Validate a text VALUE against a declaration."""
    try:
        error = validator.validate_field(value, field_name, declaration)
    except UsageError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    if error is None:
        click.echo(click.style("OK", fg="green"))
        return

    click.echo(click.style(error.description, fg="red"))
    raise SystemExit(1)
