"""
Command-line interface for Playlister.
"""

import click
import json
import os
import sys
import time
from pathlib import Path
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from requests.exceptions import RequestException
import questionary

from playlister import __version__
from playlister.export import EXPORT_FILENAME, ExportFilter, comparison_to_csv, write_csv
from playlister.matching import PlaylistComparator, find_duplicates
from playlister.models import PlaylistSnapshot, Provider, SnapshotError
from playlister.providers import ProviderError
from playlister.providers.apple import AppleMusicClient
from playlister.providers.youtube import YouTubeClient
from playlister.storage import SnapshotStore, config_home
from playlister.ui import UI, Icons

console = Console()

FILTER_CHOICES = [f.value for f in ExportFilter]
PROVIDER_CHOICES = [p.value for p in Provider]


def get_config_dir() -> Path:
    """Get Playlister configuration directory."""
    config_dir = config_home()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def load_env_file():
    """Load environment variables from .env file if it exists."""
    env_file = config_home() / '.env'
    if env_file.exists():
        load_dotenv(env_file)


# Auto-load environment variables when CLI module is imported
load_env_file()


def is_debug(ctx: click.Context = None) -> bool:
    if ctx is not None and ctx.obj and ctx.obj.get('verbose'):
        return True
    return os.environ.get('DEBUG', '').lower() in ('1', 'true', 'yes')


def fail(message: str):
    """Print an error and exit with status 1."""
    console.print(f"[red]✗ {escape(message)}[/red]")
    sys.exit(1)


def get_store() -> SnapshotStore:
    """Get initialized snapshot store."""
    store = SnapshotStore(str(get_config_dir() / 'playlister.db'))
    store.init_schema()
    return store


def get_youtube_client(debug: bool = False) -> YouTubeClient:
    """Get YouTube client from configured credentials."""
    api_key = os.environ.get('YOUTUBE_API_KEY')
    access_token = os.environ.get('YOUTUBE_ACCESS_TOKEN')

    if not api_key and not access_token:
        console.print("[red]Error: YouTube credentials not found.[/red]")
        console.print("Set YOUTUBE_API_KEY (public playlists) or YOUTUBE_ACCESS_TOKEN")
        console.print("Or run 'playlister setup' to configure")
        sys.exit(1)

    return YouTubeClient(api_key=api_key, access_token=access_token, debug=debug)


def get_apple_client() -> AppleMusicClient:
    """Get Apple Music client from configured credentials."""
    return AppleMusicClient(
        developer_token=os.environ.get('APPLE_DEVELOPER_TOKEN'),
        user_token=os.environ.get('APPLE_USER_TOKEN'),
    )


def get_client(provider: Provider, debug: bool = False):
    if provider is Provider.YOUTUBE:
        return get_youtube_client(debug)
    return get_apple_client()


def load_snapshot(ref: str, store: SnapshotStore = None) -> PlaylistSnapshot:
    """Resolve a snapshot reference.

    Args:
        ref: Path to a snapshot JSON file, or 'provider:playlist_id' of a cached snapshot
        store: Snapshot store to look cached references up in

    Returns:
        PlaylistSnapshot object

    Raises:
        SnapshotError: If the reference can't be resolved or the data is malformed
    """
    path = Path(ref)
    if path.suffix.lower() == '.json' or path.exists():
        if not path.is_file():
            raise SnapshotError(f"Snapshot file not found: {ref}")
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise SnapshotError(f"{ref} is not valid JSON: {e}")
        return PlaylistSnapshot.from_dict(data)

    provider_name, sep, playlist_id = ref.partition(':')
    if not sep or not playlist_id:
        raise SnapshotError(f"Expected a snapshot file or provider:playlist_id, got {ref!r}")
    try:
        provider = Provider(provider_name)
    except ValueError:
        raise SnapshotError(f"Unknown provider {provider_name!r} in {ref!r}")

    store = store or get_store()
    snapshot = store.get_snapshot(provider, playlist_id)
    if snapshot is None:
        raise SnapshotError(
            f"No cached snapshot for {ref}. Run 'playlister import {provider.value} {playlist_id}' first."
        )
    return snapshot


def compare_refs(left_ref: str, right_ref: str):
    left = load_snapshot(left_ref)
    right = load_snapshot(right_ref)
    return PlaylistComparator().compare(left, right)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def cli(ctx, verbose):
    """Playlister - Import playlists and see what two of them have in common.

    Import snapshots from YouTube, compare any two of them, and export
    the tracks that are only on one side (or on both) as CSV.
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


@cli.command()
def setup():
    """Configure provider credentials and save them to the .env file."""
    env_file = get_config_dir() / '.env'

    console.print()
    console.print(Panel.fit(
        f"[bold cyan]{Icons.MUSIC} Playlister Setup[/bold cyan]\n\n"
        "Configure your provider credentials",
        border_style="cyan"
    ))
    console.print()

    if env_file.exists() and not Confirm.ask(f"{env_file} already exists. Overwrite it?", default=False):
        console.print("[cyan]Setup skipped - using existing configuration[/cyan]")
        return

    console.print("[bold]YouTube[/bold]")
    console.print("  An API key is enough to import public playlists.")
    console.print("  [dim]https://console.cloud.google.com/apis/credentials[/dim]")
    youtube_api_key = Prompt.ask("YouTube API key", default="", show_default=False)
    youtube_access_token = Prompt.ask(
        "YouTube OAuth access token [dim](optional, for your own playlists)[/dim]",
        default="", show_default=False, password=True
    )
    console.print()

    apple_developer_token = ""
    if Confirm.ask("Configure Apple Music too?", default=False):
        apple_developer_token = Prompt.ask("Apple Music developer token", default="",
                                           show_default=False, password=True)

    with open(env_file, 'w') as f:
        f.write("# Playlister Environment Variables\n")
        f.write(f"# Generated on {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
        f.write("\n")
        f.write("# YouTube Credentials\n")
        if youtube_api_key:
            f.write(f"export YOUTUBE_API_KEY=\"{youtube_api_key}\"\n")
        else:
            f.write("# export YOUTUBE_API_KEY=\"\"\n")
        if youtube_access_token:
            f.write(f"export YOUTUBE_ACCESS_TOKEN=\"{youtube_access_token}\"\n")
        else:
            f.write("# export YOUTUBE_ACCESS_TOKEN=\"\"\n")
        f.write("\n")

        if apple_developer_token:
            f.write("# Apple Music Credentials\n")
            f.write(f"export APPLE_DEVELOPER_TOKEN=\"{apple_developer_token}\"\n")
        else:
            f.write("# Apple Music - Not configured\n")
            f.write("# export APPLE_DEVELOPER_TOKEN=\"\"\n")

    console.print(f"[green]✓ Credentials saved to {env_file}[/green]")
    console.print()
    console.print("[bold]Next steps:[/bold]")
    console.print("  1. [cyan]playlister import youtube <playlist id or url>[/cyan]")
    console.print("  2. [cyan]playlister compare youtube:<left id> youtube:<right id>[/cyan]")
    console.print()


@cli.command()
@click.argument('provider', type=click.Choice(PROVIDER_CHOICES))
@click.pass_context
def playlists(ctx, provider):
    """List your playlists on PROVIDER."""
    provider = Provider(provider)
    ui = UI(console)

    if provider is Provider.APPLE:
        ui.print_info("Apple Music requires a playlist URL for import")
        return

    try:
        client = get_client(provider, is_debug(ctx))
        with Progress(SpinnerColumn(), TextColumn("[bold blue]{task.description}"), console=console) as progress:
            progress.add_task("Fetching playlists...", total=None)
            found = client.list_playlists()
    except (ProviderError, RequestException) as e:
        fail(f"Failed to list playlists: {e}")

    ui.show_playlists("YouTube", found)


@cli.command(name='import')
@click.argument('provider', type=click.Choice(PROVIDER_CHOICES))
@click.argument('playlist', required=False)
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Also write the snapshot JSON to this file')
@click.pass_context
def import_playlist(ctx, provider, playlist, output):
    """Import PLAYLIST (ID or URL) from PROVIDER and cache it.

    \b
    Examples:
        playlister import youtube PLx0sYbCqOb8TBPRdmBHs5Iftvv9TPboYG
        playlister import youtube "https://www.youtube.com/playlist?list=PL..."
        playlister import youtube            # pick from your playlists
    """
    provider = Provider(provider)
    ui = UI(console)

    try:
        client = get_client(provider, is_debug(ctx))

        if not playlist:
            available = client.list_playlists()
            if not available:
                ui.print_warning("No playlists to choose from. Pass a playlist ID or URL.")
                return
            playlist = questionary.select(
                "Select a playlist to import:",
                choices=[
                    questionary.Choice(
                        title=f"{p.title} ({p.item_count if p.item_count is not None else '?'} tracks)",
                        value=p.id,
                    )
                    for p in available
                ],
            ).ask()
            if playlist is None:
                console.print("\n[yellow]Import cancelled[/yellow]\n")
                return

        with Progress(SpinnerColumn(), TextColumn("[bold blue]{task.description}"), console=console) as progress:
            progress.add_task(f"Importing {playlist}...", total=None)
            snapshot = client.import_playlist(playlist)
    except (ProviderError, RequestException) as e:
        fail(f"Failed to import playlist: {e}")

    get_store().save_snapshot(snapshot)
    ui.print_success(f"Imported '{escape(snapshot.name)}' ({len(snapshot.tracks)} tracks)")
    console.print(f"  Reference: [cyan]{snapshot.provider.value}:{snapshot.playlist_id_or_url}[/cyan]")

    if output:
        try:
            Path(output).write_text(json.dumps(snapshot.to_dict(), indent=2), encoding='utf-8')
        except OSError as e:
            fail(f"Failed to write snapshot to {output}: {e}")
        ui.print_success(f"Snapshot written to {output}")


@cli.command()
@click.option('--clear', 'clear_cache', is_flag=True, help='Remove all cached snapshots')
def snapshots(clear_cache):
    """List cached playlist snapshots."""
    store = get_store()
    ui = UI(console)

    if clear_cache:
        if Confirm.ask("Remove all cached snapshots?", default=False):
            removed = store.clear()
            ui.print_success(f"Removed {removed} cached snapshots")
        return

    ui.show_snapshots(store.list_snapshots())


@cli.command()
@click.argument('left')
@click.argument('right')
@click.option('--show', type=click.Choice(FILTER_CHOICES), default='all', help='Which tracks to list')
@click.option('--limit', '-n', type=int, default=None, help='Maximum tracks per table')
@click.option('--json', 'json_path', type=click.Path(dir_okay=False), help='Write the full result as JSON')
def compare(left, right, show, limit, json_path):
    """Compare two playlists.

    LEFT and RIGHT are snapshot JSON files or cached references
    (provider:playlist_id, see 'playlister snapshots').

    \b
    Examples:
        playlister compare youtube:PLabc youtube:PLxyz
        playlister compare left.json right.json --show onlyLeft
    """
    try:
        result = compare_refs(left, right)
    except SnapshotError as e:
        fail(str(e))

    UI(console).show_comparison(result, ExportFilter(show), limit)
    console.print(f"[bold]Summary:[/bold] {result.summary()}")

    if json_path:
        try:
            Path(json_path).write_text(json.dumps(result.to_dict(), indent=2), encoding='utf-8')
        except OSError as e:
            fail(f"Failed to write result to {json_path}: {e}")
        console.print(f"[green]✓ Result written to {json_path}[/green]")


@cli.command()
@click.argument('left')
@click.argument('right')
@click.option('--filter', 'export_filter', type=click.Choice(FILTER_CHOICES), default='all',
              help='Which tracks to export')
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help=f'CSV file to write (default: stdout; e.g. {EXPORT_FILENAME})')
def export(left, right, export_filter, output):
    """Export the comparison of LEFT and RIGHT as CSV."""
    try:
        result = compare_refs(left, right)
    except SnapshotError as e:
        fail(str(e))

    if output:
        try:
            path = write_csv(result, output, export_filter)
        except OSError as e:
            fail(f"Failed to write CSV to {output}: {e}")
        console.print(f"[green]✓ CSV written to {path}[/green]")
    else:
        click.echo(comparison_to_csv(result, export_filter))


@cli.command()
@click.argument('snapshot')
def dupes(snapshot):
    """Show tracks that appear more than once in SNAPSHOT."""
    try:
        playlist = load_snapshot(snapshot)
    except SnapshotError as e:
        fail(str(e))

    UI(console).show_duplicates(playlist.name, find_duplicates(playlist.tracks))


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
