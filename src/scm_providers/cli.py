"""
Command-line interface for scm-providers.
"""
import json
import sys

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import print as rprint

from scm_providers import __version__
from scm_providers.config import get_settings
from scm_providers.core.exceptions import ScmProviderError
from scm_providers.providers import ProviderFactory
from scm_providers.utils import get_logger

console = Console()
logger = get_logger(__name__)


def _provider_options(func):
    """Options shared by the commands talking to a hosting service."""
    func = click.option('--server', help='Web server root URL')(func)
    func = click.option('--endpoint', help='REST API root URL')(func)
    func = click.option('--token', envvar='SCM_PROVIDERS_TOKEN', help='Authentication token')(func)
    func = click.argument('project')(func)
    func = click.argument('platform')(func)
    return func


def _create_provider(platform, project, token, endpoint, server):
    return ProviderFactory.create_provider(
        platform, project, token=token, endpoint=endpoint, server=server
    )


def _fail(error: Exception) -> None:
    rprint(f"[red]Error: {error}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--debug', is_flag=True, help='Enable debug mode')
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True), help='Path to configuration file')
def main(debug, config_path):
    """Query branches, tags and files on source hosting services."""
    if config_path:
        from scm_providers.config import reload_settings
        reload_settings(config_path)
    if debug:
        import logging
        logging.getLogger('scm_providers').setLevel(logging.DEBUG)


@main.command()
def platforms():
    """List supported platforms and their default URLs."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Platform", style="cyan")
    table.add_column("Server", style="green")
    table.add_column("Endpoint", style="green")

    for platform in ProviderFactory.list_available_platforms():
        urls = ProviderFactory.default_urls(platform)
        table.add_row(platform, urls['server'], urls['endpoint'])

    console.print(table)


@main.command()
@_provider_options
def info(platform, project, token, endpoint, server):
    """Show the URLs of a project."""
    try:
        provider = _create_provider(platform, project, token, endpoint, server)
    except ScmProviderError as e:
        _fail(e)

    rprint(Panel.fit(
        f"[bold blue]{provider.name}: {provider.project}[/bold blue]",
        border_style="blue"
    ))

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Endpoint URL", provider.endpoint_url())
    table.add_row("Clone URL", provider.clone_url())
    table.add_row("Repository URL", provider.repository_url())
    table.add_row("Credentials", "yes" if provider.has_credentials else "no")
    console.print(table)


def _list_refs(kind, platform, project, token, endpoint, server, output):
    try:
        provider = _create_provider(platform, project, token, endpoint, server)
        refs = provider.branches() if kind == 'branches' else provider.tags()
    except ScmProviderError as e:
        _fail(e)

    if output == 'json':
        click.echo(json.dumps([ref.to_dict() for ref in refs], indent=2))
        return

    table = Table(title=f"{kind.capitalize()} of {project}", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Commit", style="green")
    for ref in refs:
        table.add_row(ref.name, ref.commit_id or "-")
    console.print(table)
    rprint(f"[bold]{len(refs)}[/bold] {kind}")


@main.command()
@_provider_options
@click.option('--output', '-o', type=click.Choice(['table', 'json']), default='table')
def branches(platform, project, token, endpoint, server, output):
    """List the branches of a project."""
    _list_refs('branches', platform, project, token, endpoint, server, output)


@main.command()
@_provider_options
@click.option('--output', '-o', type=click.Choice(['table', 'json']), default='table')
def tags(platform, project, token, endpoint, server, output):
    """List the tags of a project."""
    _list_refs('tags', platform, project, token, endpoint, server, output)


@main.command()
@_provider_options
@click.argument('path')
def read(platform, project, token, endpoint, server, path):
    """Print a file from the default branch of a project."""
    try:
        provider = _create_provider(platform, project, token, endpoint, server)
        content = provider.read_content(path)
    except ScmProviderError as e:
        _fail(e)

    click.echo(content.decode('utf-8', errors='replace'), nl=False)


@main.command()
@click.option('--validate', '-v', is_flag=True, help='Validate configuration')
def config(validate: bool):
    """Show and validate configuration."""
    settings = get_settings()

    if validate:
        errors = settings.validate()
        if errors:
            rprint("[red]Configuration validation failed:[/red]")
            for error in errors:
                rprint(f"  • {error}")
            sys.exit(1)
        rprint("[green]Configuration is valid![/green]")
        return

    rprint(Panel.fit(
        "[bold blue]SCM Providers Configuration[/bold blue]",
        border_style="blue"
    ))

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Setting", style="cyan", width=40)
    table.add_column("Value", style="green")

    def add_section(section_name: str, section_data: dict):
        for key, value in section_data.items():
            if isinstance(value, dict):
                add_section(f"{section_name}.{key}", value)
            else:
                table.add_row(f"{section_name}.{key}", str(value))

    for section_name, section_data in settings.to_dict().items():
        add_section(section_name, section_data)

    console.print(table)


if __name__ == '__main__':
    main()
