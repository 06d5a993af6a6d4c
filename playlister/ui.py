"""
Terminal UI components for Playlister.
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape
from typing import Dict, List, Optional, Sequence

from playlister.export import ExportFilter
from playlister.models import ComparisonResult, NormalizedTrack
from playlister.providers import PlaylistInfo


class Icons:
    """Icons used in terminal output."""
    MUSIC = "🎵"
    LEFT = "◀"
    RIGHT = "▶"
    BOTH = "●"


def _format_duration(seconds: Optional[float]) -> str:
    if not seconds:
        return "—"
    seconds = int(seconds)
    return f"{seconds // 60}:{seconds % 60:02d}"


class UI:
    """Terminal-based user interface."""

    def __init__(self, console: Console = None):
        """Initialize UI.

        Args:
            console: Console to print to (default: a new stdout console)
        """
        self.console = console or Console()

    def show_comparison(self, result: ComparisonResult, show: ExportFilter = ExportFilter.ALL,
                        limit: int = None):
        """Show a comparison as summary plus one table per partition.

        Args:
            result: ComparisonResult to display
            show: Which partitions to list
            limit: Maximum rows per table (None shows all)
        """
        self.console.print()
        self.console.print(Panel.fit(
            f"[bold cyan]{Icons.MUSIC} {escape(result.left.name)}[/bold cyan] "
            f"[dim]({result.left.provider.value})[/dim]  vs  "
            f"[bold magenta]{escape(result.right.name)}[/bold magenta] "
            f"[dim]({result.right.provider.value})[/dim]",
            border_style="cyan"
        ))
        self.console.print()

        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Metric", style="bold")
        table.add_column("Count")
        table.add_row("Only in Left", f"[cyan]{len(result.only_in_left)}[/cyan]")
        table.add_row("Only in Right", f"[magenta]{len(result.only_in_right)}[/magenta]")
        table.add_row("In Both", f"[green]{len(result.in_both)}[/green]")
        weak = sum(1 for pair in result.in_both if pair.is_weak)
        if weak:
            table.add_row("Album/duration differs", f"[yellow]{weak}[/yellow]")
        self.console.print(table)
        self.console.print()

        if show in (ExportFilter.ALL, ExportFilter.ONLY_LEFT):
            self._show_tracks(f"{Icons.LEFT} Only in Left", result.only_in_left, "cyan", limit)
        if show in (ExportFilter.ALL, ExportFilter.ONLY_RIGHT):
            self._show_tracks(f"{Icons.RIGHT} Only in Right", result.only_in_right, "magenta", limit)
        if show in (ExportFilter.ALL, ExportFilter.BOTH):
            self._show_tracks(f"{Icons.BOTH} In Both", [pair.left for pair in result.in_both],
                              "green", limit)

    def _show_tracks(self, title: str, tracks: Sequence[NormalizedTrack], color: str,
                     limit: Optional[int]):
        if not tracks:
            return

        table = Table(title=f"[bold {color}]{title} ({len(tracks)})[/bold {color}]",
                      show_header=True, header_style=f"bold {color}")
        table.add_column("#", justify="right", width=4)
        table.add_column("Title", style="white")
        table.add_column("Artist")
        table.add_column("Album", style="dim")
        table.add_column("Duration", justify="right", width=8)

        shown = tracks if limit is None else tracks[:limit]
        for index, track in enumerate(shown, start=1):
            table.add_row(str(index), escape(track.title), escape(track.artist), escape(track.album or "—"),
                          _format_duration(track.duration_seconds))

        self.console.print(table)
        if limit is not None and len(tracks) > limit:
            self.console.print(f"  [dim]... and {len(tracks) - limit} more[/dim]")
        self.console.print()

    def show_playlists(self, provider_name: str, playlists: List[PlaylistInfo]):
        """Show remote playlists of a provider."""
        if not playlists:
            self.print_warning(f"No {provider_name} playlists found.")
            return

        table = Table(title=f"[bold cyan]Your {provider_name} Playlists[/bold cyan]",
                      show_header=True, header_style="bold cyan")
        table.add_column("Playlist Name", style="white")
        table.add_column("ID", style="dim")
        table.add_column("Tracks", justify="right", width=8)

        for playlist in playlists:
            count = str(playlist.item_count) if playlist.item_count is not None else "?"
            table.add_row(escape(playlist.title), playlist.id, count)

        self.console.print(table)
        self.console.print()

    def show_snapshots(self, snapshots: List[Dict]):
        """Show cached snapshots."""
        if not snapshots:
            self.print_warning("No cached snapshots. Run 'playlister import' first.")
            return

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Reference", style="cyan")
        table.add_column("Name", style="white")
        table.add_column("Tracks", justify="right", width=8)
        table.add_column("Fetched", width=20)

        for snapshot in snapshots:
            table.add_row(
                f"{snapshot['provider']}:{snapshot['playlist_id']}",
                escape(snapshot['name']),
                str(snapshot.get('track_count', 0)),
                snapshot['fetched_at'][:16].replace('T', ' '),
            )

        self.console.print(table)
        self.console.print()

    def show_duplicates(self, playlist_name: str, groups: List[List[NormalizedTrack]]):
        """Show groups of repeated tracks inside one playlist."""
        if not groups:
            self.print_success(f"No duplicates in {escape(playlist_name)}")
            return

        extra = sum(len(group) - 1 for group in groups)
        self.console.print(f"\n[bold yellow]{len(groups)} duplicated tracks in {escape(playlist_name)}[/bold yellow] "
                           f"[dim]({extra} extra copies)[/dim]\n")
        for group in groups:
            first = group[0]
            self.console.print(f"  [yellow]×{len(group)}[/yellow] {escape(first.title)} [dim]— {escape(first.artist)}[/dim]")
        self.console.print()

    def print_success(self, message: str):
        """Print a success message."""
        self.console.print(f"[green]✓ {message}[/green]")

    def print_error(self, message: str):
        """Print an error message."""
        self.console.print(f"[red]✗ {message}[/red]")

    def print_warning(self, message: str):
        """Print a warning message."""
        self.console.print(f"[yellow]⚠ {message}[/yellow]")

    def print_info(self, message: str):
        """Print an info message."""
        self.console.print(f"[blue]ℹ {message}[/blue]")
