"""Click CLI commands for flask-apiparams.

Provides the 'flask apiparams' command group with a 'scan' subcommand that
dumps the explored endpoint parameters and definitions.
"""

from __future__ import annotations

import json
import re

import click
import yaml
from flask import current_app
from flask.cli import AppGroup, with_appcontext

from flask_apiparams.explorers import DefinitionConflictError

apiparams_cli = AppGroup("apiparams", help="OpenAPI parameter exploration commands.")


@apiparams_cli.command("scan")
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default=None,
    help="Dump format. Default: APIPARAMS_OUTPUT_FORMAT config.",
)
@click.option(
    "--include",
    type=str,
    default=None,
    help="Regex pattern: only include matching endpoint IDs.",
)
@click.option(
    "--exclude",
    type=str,
    default=None,
    help="Regex pattern: exclude matching endpoint IDs.",
)
@with_appcontext
def scan_command(output_format, include, exclude):
    """Explore Flask routes and print their parameters and definitions."""
    app = current_app._get_current_object()
    settings = app.extensions["apiparams"]["settings"]
    output_format = output_format or settings.output_format

    for option, pattern in (("--include", include), ("--exclude", exclude)):
        if pattern:
            try:
                re.compile(pattern)
            except re.error as e:
                raise click.ClickException(f"Invalid {option} pattern: '{pattern}'. Must be valid regex. Error: {e}")

    from flask_apiparams.extension import ApiParams

    try:
        result = ApiParams().scan(app, include=include, exclude=exclude)
    except DefinitionConflictError as e:
        raise click.ClickException(str(e))

    for endpoint in result.endpoints:
        for warning in endpoint.warnings:
            click.echo(f"[flask-apiparams] WARNING: {warning}", err=True)

    data = result.to_dict()
    if output_format == "yaml":
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True))
    else:
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
