#!/usr/bin/env python3
"""CLI entry point for the SIGIL template engine."""

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

import click

from config import settings
from engine import SigilEngine, TokenDescriptor
from template_parser import RepetitionRange
from yaml_loader import SigilDataError, load_sigil_data


def token_to_dict(token: TokenDescriptor) -> dict:
    """Convert a token descriptor to a JSON-friendly dict."""
    repetition = token.repetition
    if isinstance(repetition, RepetitionRange):
        repetition = {"min": repetition.min, "max": repetition.max}
    return {
        "path": token.path,
        "modifiers": [m.value for m in token.modifiers],
        "is_optional": token.is_optional,
        "exclusions": list(token.exclusions),
        "repetition": repetition,
        "raw": token.raw,
        "start": token.start,
        "end": token.end,
    }


@click.command()
@click.option(
    '-d', '--data',
    'data_files',
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML list file (repeatable, merged in order; default: SIGIL_DATA_FILES or data/*.yaml)'
)
@click.option(
    '-t', '--template',
    default=None,
    help='Template to generate, e.g. "{a} [weapon.melee] of [materials]"'
)
@click.option(
    '--name',
    default=None,
    help='Generate from a named template in the data files'
)
@click.option(
    '-n', '--count',
    default=1,
    type=click.IntRange(min=1),
    help='Number of results to generate (default: 1)'
)
@click.option(
    '--seed',
    default=None,
    help='Seed for reproducible output'
)
@click.option(
    '--max-depth',
    default=None,
    type=click.IntRange(min=0),
    help='Maximum nested re-resolution depth (default: 10)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Log resolution steps and warnings to stderr'
)
@click.option(
    '--validate',
    is_flag=True,
    help='Check the template structure instead of generating'
)
@click.option(
    '--tokens',
    is_flag=True,
    help='List the table references in the template as JSON instead of generating'
)
@click.option(
    '--list-templates',
    is_flag=True,
    help='List named templates found in the data files'
)
@click.option(
    '--serve',
    is_flag=True,
    help='Start the HTTP API server instead of generating'
)
@click.option(
    '--host',
    default=None,
    help='Host for --serve (default: 127.0.0.1)'
)
@click.option(
    '--port',
    default=None,
    type=int,
    help='Port for --serve (default: 8000)'
)
def main(
    data_files: tuple[Path, ...],
    template: str | None,
    name: str | None,
    count: int,
    seed: str | None,
    max_depth: int | None,
    debug: bool,
    validate: bool,
    tokens: bool,
    list_templates: bool,
    serve: bool,
    host: str | None,
    port: int | None,
):
    """
    Generate random text from SIGIL templates and YAML list data.

    Example:
        sigil -d fantasy.yaml -t "{a} [weapon.melee] of [materials.capitalize]" -n 5
        sigil -d fantasy.yaml --name encounter --seed 42
        sigil -t "{[a]&[b]?}" --validate

    Web API (data from SIGIL_DATA_FILES or data/*.yaml):
        sigil --serve --port 8000
    """
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if serve:
        import uvicorn
        from server.app import app

        host = host or settings.server.host
        port = port or settings.server.port
        click.echo(f"Starting SIGIL API server on http://{host}:{port}")
        uvicorn.run(app, host=host, port=port)
        return

    if template is not None and name is not None:
        click.echo("Error: Cannot use both --template and --name", err=True)
        sys.exit(1)

    if template is None and name is None and not list_templates:
        click.echo("Error: --template is required (or use --name/--list-templates)", err=True)
        sys.exit(1)

    if (validate or tokens) and template is None:
        click.echo("Error: --validate and --tokens require --template", err=True)
        sys.exit(1)

    paths = list(data_files) or settings.resolve_data_files()
    try:
        data = load_sigil_data(paths)
    except SigilDataError as e:
        click.echo(f"Error loading data: {e}", err=True)
        sys.exit(1)

    config = replace(
        settings.engine,
        debug=debug or settings.engine.debug,
        seed=seed if seed is not None else settings.engine.seed,
        max_depth=max_depth if max_depth is not None else settings.engine.max_depth,
    )
    engine = SigilEngine.from_data(data, config)

    if list_templates:
        names = engine.template_names()
        if not names:
            click.echo("No named templates found", err=True)
        for template_name in names:
            click.echo(template_name)
        return

    if validate:
        result = engine.validate_template(template)
        if result.valid:
            click.echo("Template is valid")
            return
        for error in result.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)

    if tokens:
        click.echo(json.dumps([token_to_dict(t) for t in engine.parse_tokens(template)], indent=2))
        return

    if name is not None and name not in engine.templates:
        click.echo(f"Error: Unknown template: {name}", err=True)
        sys.exit(1)

    for _ in range(count):
        if name is not None:
            click.echo(engine.generate_template(name))
        else:
            click.echo(engine.generate(template))


if __name__ == '__main__':
    main()
