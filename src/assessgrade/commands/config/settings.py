"""
Configuration Settings Commands

This module contains the configuration display command implementation.
"""

import json
from dataclasses import asdict

import click
import yaml
from rich.console import Console
from rich.table import Table

from ...utils.logging import get_logger

console = Console()
logger = get_logger(__name__)

SECTIONS = ('judge', 'grading', 'reporting', 'logging')


@click.command()
@click.option('--format', 'output_format', type=click.Choice(['table', 'json', 'yaml']),
              default='table', help='Output format')
@click.pass_context
def show(ctx, output_format):
    """Show current configuration.

    \b
    EXAMPLES:

    assessgrade config show
    assessgrade config show --format json
    assessgrade config show --format yaml
    """
    config = ctx.obj.get('config') if ctx.obj else None
    if not config:
        console.print("[red]Configuration not available[/red]")
        return

    config_dict = asdict(config)

    if output_format == 'table':
        table = Table(title="Configuration")
        table.add_column("Section", style="cyan")
        table.add_column("Setting", style="magenta")
        table.add_column("Value", style="green")

        for setting in ('name', 'version', 'environment', 'debug'):
            table.add_row("app", setting, str(config_dict[setting]))
        for section in SECTIONS:
            for setting, value in config_dict[section].items():
                table.add_row(section, setting, str(value))

        console.print(table)

    elif output_format == 'json':
        click.echo(json.dumps(config_dict, indent=2))

    else:
        click.echo(yaml.safe_dump(config_dict, default_flow_style=False, indent=2, sort_keys=False))
