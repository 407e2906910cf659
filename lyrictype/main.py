"""
Main CLI interface for LyricType

Command-line front end for the typing engine and the song queue. It is the
only place where terminal input is turned into keystrokes; everything it
shows comes from TypingSession and QueueManager state.

Command groups:
- Game (search, play)
- Local data (history, recent)
- Configuration management (show, set)
"""

import asyncio
import functools
import sys
from typing import Awaitable, Callable, Optional

import click

from . import __version__
from .config.settings import get_settings, reload_settings
from .core.exceptions import ArtistLoadError, LyricTypeError
from .core.state import StateStore
from .lyrics.genius import GeniusLyricsAPI
from .session.live import LiveWpmMonitor
from .session.models import TypingResult
from .session.typing_session import END_TEST_CHAR, TypingSession
from .songs.history import CompletedSongsLog
from .songs.manager import QueueManager
from .songs.models import ArtistRef, SongRecord
from .songs.recent import RecentArtistsCache
from .songs.search import ArtistSearch
from .utils.helpers import format_duration
from .utils.logger import configure_from_settings, get_logger

logger = get_logger(__name__)

# In-game commands typed instead of lyrics
COMMANDS = {
    ':next': 'skip to the next song',
    ':prev': 'go back to the previous song',
    ':restart': 'start this song over',
    ':pause': 'pause the clock',
    ':quit': 'stop playing',
}

ReadLine = Callable[[str], Awaitable[str]]


def print_banner():
    """Print application banner to console"""
    banner = """
╔═══════════════════════════════════════════════╗
║                   LyricType                   ║
║                                               ║
║     Type the lyrics of the songs you love     ║
╚═══════════════════════════════════════════════╝
    """
    click.echo(click.style(banner, fg='magenta', bold=True))


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    LyricTypeError messages are shown as-is; anything else is logged and
    reported as a generic failure. Both exit with status 1.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)
        except LyricTypeError as e:
            logger.error(f"Command failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
            click.echo(click.style(f"Error: {e.message}", fg='red'), err=True)
            sys.exit(1)
        except Exception as e:
            logger.exception(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def feed_text(session: TypingSession, text: str) -> int:
    """
    Type ``text`` into a session one character at a time

    Args:
        session: Session to type into
        text: Characters entered by the player

    Returns:
        Number of characters rejected by the separator rule
    """
    rejected = 0
    for ch in text:
        if session.is_completed:
            break
        if not session.handle_keystroke(session.user_input + ch) and not session.is_completed:
            rejected += 1
    return rejected


def current_line_bounds(session: TypingSession) -> tuple:
    """(start, end) of the lyric line the cursor is on, end excluding the newline"""
    position = len(session.user_input)
    text = session.display_lyrics
    start = text.rfind('\n', 0, position) + 1
    end = text.find('\n', position)
    return start, (len(text) if end == -1 else end)


def format_result(result: TypingResult) -> str:
    lines = [
        f"WPM: {result.wpm:.1f} (raw {result.raw_wpm:.1f})",
        f"Accuracy: {result.accuracy:.1f}%",
        f"Characters: {result.characters_typed} typed, {result.incorrect_count} wrong",
        f"Time: {format_duration(result.active_seconds)}",
    ]
    if result.ended_early:
        lines.append("Ended early")
    return '\n'.join(lines)


async def _prompt(message: str) -> str:
    return await asyncio.to_thread(click.prompt, message, default='', show_default=False, prompt_suffix='')


async def play_song(session: TypingSession, read_line: ReadLine, live_interval: float = 0.5) -> Optional[str]:
    """
    Run one typing test in the terminal

    The remaining part of the current lyric line is shown and the player
    types it; line breaks are typed automatically once a line is done.

    Returns:
        A navigation command (':next', ':prev', ':quit') or None once
        the test completed
    """
    latest = {'wpm': 0.0}
    monitor = LiveWpmMonitor(session, lambda wpm: latest.update(wpm=wpm), interval=live_interval)
    monitor.start()

    try:
        while not session.is_completed:
            position = len(session.user_input)
            _, line_end = current_line_bounds(session)

            if position == line_end:
                session.handle_keystroke(session.user_input + ' ')
                continue

            click.echo(click.style(session.display_lyrics[position:line_end], fg='cyan'))
            typed = await read_line(f"[{latest['wpm']:.0f} wpm, {session.progress:.0%}] > ")
            command = typed.strip().lower()

            if command in (':next', ':prev', ':quit'):
                return command
            if command == ':restart':
                session.restart()
                monitor.stop()
                monitor.start()
                click.echo("Restarted")
                continue
            if command == ':pause':
                session.set_paused(True)
                await read_line("Paused - press Enter to resume ")
                session.set_paused(False)
                continue

            rejected = feed_text(session, typed[:line_end - position] if END_TEST_CHAR not in typed else typed)
            if rejected:
                click.echo(click.style(f"{rejected} characters rejected (spaces must match the lyrics)", fg='yellow'))
    finally:
        monitor.stop()

    return None


async def run_game(
    manager: QueueManager,
    artist: ArtistRef,
    history: CompletedSongsLog,
    on_change: Callable[[], None],
    read_line: ReadLine = _prompt
) -> int:
    """
    Play songs of an artist until the player quits or the songs run out

    Returns:
        Number of completed tests
    """
    settings = get_settings()

    song: Optional[SongRecord] = await manager.initialize_with_artist(artist)
    image_task = None
    if not artist.image_url:
        image_task = asyncio.create_task(manager.poll_artist_image(artist.id))
    on_change()

    completed = 0
    while song is not None:
        click.echo()
        click.echo(click.style(song.display_name, fg='green', bold=True))

        session = TypingSession(
            song.lyrics,
            capitalization=settings.game.capitalization,
            punctuation=settings.game.punctuation,
            error_penalty=settings.game.error_penalty,
        )

        if session.total_length == 0:
            click.echo("Nothing to type in this excerpt, skipping")
            song = await manager.go_to_next()
            continue

        command = await play_song(session, read_line, settings.game.live_wpm_interval)

        if command == ':quit':
            break

        if session.result is not None:
            completed += 1
            history.add(song, session.result)
            on_change()
            click.echo(click.style(format_result(session.result), fg='yellow'))
            upcoming = manager.upcoming(settings.queue.upcoming_count)
            if upcoming:
                click.echo("Up next: " + ", ".join(s.title for s in upcoming))
            command = (await read_line("[Enter] next, :prev, :quit > ")).strip().lower() or ':next'
            if command == ':quit':
                break

        if command == ':prev':
            previous = manager.go_to_previous()
            if previous is None:
                click.echo("Already at the first song")
            song = previous or song
        else:
            song = await manager.go_to_next()
            if song is None:
                click.echo(click.style("No more songs for this artist", fg='yellow'))

    if image_task is not None:
        if not image_task.done():
            image_task.cancel()
        elif image_task.result():
            on_change()
    return completed


def _load_state(store: StateStore):
    state = store.load()
    recent = RecentArtistsCache.from_list(state['recent_artists'])
    history = CompletedSongsLog.from_list(state['completed_songs'])
    return state, recent, history


# Main CLI group
@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    LyricType - typing practice with song lyrics

    Pick an artist, type excerpts of their songs and track your speed and
    accuracy over time.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"LyricType v{__version__}")
        return

    if config:
        reload_settings(config)

    settings = get_settings()
    if verbose:
        settings.logging.level = 'DEBUG'
        ctx.obj['verbose'] = True
    configure_from_settings()

    if ctx.invoked_subcommand is None:
        print_banner()
        click.echo(ctx.get_help())


@cli.command()
@click.argument('query')
@click.option('--limit', '-l', type=int, help='Maximum number of results')
@handle_error
def search(query, limit):
    """
    Search artists on Genius

    Results are ranked with popular artists and exact matches first.
    """
    settings = get_settings()
    artist_search = ArtistSearch(
        GeniusLyricsAPI(),
        debounce_ms=0,
        max_results=limit or settings.search.max_results,
    )

    results = asyncio.run(artist_search.search(query)) or []
    if not results:
        click.echo("No artists found")
        return

    for artist in results:
        marker = click.style(' *', fg='yellow') if artist.is_popular else ''
        click.echo(f"{artist.id:>10}  {artist.name}{marker}")


@cli.command()
@click.argument('query', required=False)
@click.option('--artist-id', type=int, help='Play this Genius artist ID directly')
@click.option('--capitalization/--no-capitalization', default=None, help='Keep original casing')
@click.option('--punctuation/--no-punctuation', default=None, help='Keep punctuation')
@handle_error
def play(query, artist_id, capitalization, punctuation):
    """
    Play typing tests with songs of an artist

    QUERY is searched on Genius unless it matches a recent artist. Type each
    line shown and press Enter; type ~ to end a test early. In-game commands:
    :next, :prev, :restart, :pause, :quit.
    """
    settings = get_settings()
    store = StateStore(settings.get_state_path())
    state, recent, history = _load_state(store)

    # Saved toggles, then command line
    game_state = state.get('game') or {}
    settings.game.capitalization = game_state.get('capitalization', settings.game.capitalization)
    settings.game.punctuation = game_state.get('punctuation', settings.game.punctuation)
    if capitalization is not None:
        settings.game.capitalization = capitalization
    if punctuation is not None:
        settings.game.punctuation = punctuation

    def save_state():
        store.save({
            'recent_artists': recent.to_list(),
            'completed_songs': history.to_list(),
            'game': {
                'capitalization': settings.game.capitalization,
                'punctuation': settings.game.punctuation,
            },
        })

    async def main():
        api = GeniusLyricsAPI()
        artist = await resolve_artist(api, recent, query, artist_id)
        if artist is None:
            click.echo("No matching artist found")
            return 0

        manager = QueueManager(
            api,
            recent=recent,
            prefetch_count=settings.queue.prefetch_count,
            lookahead_threshold=settings.queue.lookahead_threshold,
            excerpt_lines=settings.game.excerpt_lines,
            poll_attempts=settings.network.poll_attempts,
            retry_delay=settings.network.retry_delay,
            retry_backoff=settings.network.retry_backoff,
        )
        try:
            return await run_game(manager, artist, history, save_state)
        except ArtistLoadError:
            save_state()
            raise

    print_banner()
    completed = asyncio.run(main())
    save_state()

    click.echo(f"\nCompleted {completed} songs this session")
    if len(history):
        click.echo(f"Best WPM: {history.best_wpm():.1f}")


async def resolve_artist(api, recent: RecentArtistsCache, query: Optional[str], artist_id: Optional[int]) -> Optional[ArtistRef]:
    """Pick the artist to play from an ID, a recent artist or a search"""
    if artist_id is not None:
        cached = recent.get(artist_id)
        if cached is not None:
            return cached
        info = await api.get_artist_info(artist_id)
        return ArtistRef(id=artist_id, name=info.name or str(artist_id), image_url=info.image_url)

    if not query:
        return next(iter(recent), None)

    for artist in recent:
        if artist.name.casefold() == query.strip().casefold():
            return artist

    results = await ArtistSearch(api, debounce_ms=0).search(query)
    return results[0] if results else None


@cli.command()
@click.option('--limit', '-l', type=int, default=10, help='Number of entries to show')
@handle_error
def history(limit):
    """Show recently completed songs"""
    store = StateStore(get_settings().get_state_path())
    _, _, completed = _load_state(store)

    if not len(completed):
        click.echo("No completed songs yet")
        return

    for entry in list(completed)[:limit]:
        click.echo(
            f"{entry.completed_at[:16].replace('T', ' ')}  "
            f"{entry.wpm:>6.1f} wpm  {entry.accuracy:>6.1f}%  {entry.artist} - {entry.title}"
        )

    click.echo(f"\nBest: {completed.best_wpm():.1f} wpm, average accuracy {completed.average_accuracy():.1f}%")


@cli.command()
@handle_error
def recent():
    """Show recently played artists"""
    store = StateStore(get_settings().get_state_path())
    _, artists, _ = _load_state(store)

    if not len(artists):
        click.echo("No recent artists")
        return

    for artist in artists:
        click.echo(f"{artist.id:>10}  {artist.name}")


# Configuration commands group
@cli.group()
def config():
    """Configuration management"""
    pass


@config.command()
@handle_error
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Game:")
    click.echo(f"   Capitalization: {settings.game.capitalization}")
    click.echo(f"   Punctuation: {settings.game.punctuation}")
    click.echo(f"   Excerpt lines: {settings.game.excerpt_lines}")
    click.echo(f"   Error penalty: {settings.game.error_penalty} wpm per wrong character")

    click.echo("\nQueue:")
    click.echo(f"   Prefetch count: {settings.queue.prefetch_count}")
    click.echo(f"   Lookahead threshold: {settings.queue.lookahead_threshold}")

    click.echo("\nLyrics:")
    click.echo(f"   Genius API key: {'set' if settings.lyrics.genius_api_key else 'missing'}")
    click.echo(f"   Timeout: {settings.lyrics.timeout}s")

    click.echo("\nSearch:")
    click.echo(f"   Debounce: {settings.search.debounce_ms}ms")
    click.echo(f"   Max results: {settings.search.max_results}")

    click.echo(f"\nState file: {settings.get_state_path()}")

    problems = settings.validate()
    if problems:
        click.echo(click.style("\nProblems:", fg='red'))
        for problem in problems:
            click.echo(f"   • {problem}")


@config.command(name='set')
@click.option('--capitalization/--no-capitalization', default=None, help='Keep original casing')
@click.option('--punctuation/--no-punctuation', default=None, help='Keep punctuation')
@click.option('--excerpt-lines', type=int, help='Lines per excerpt')
@click.option('--prefetch-count', type=int, help='Songs fetched ahead in the background')
@click.option('--debounce-ms', type=int, help='Search debounce delay')
@handle_error
def set_config(capitalization, punctuation, excerpt_lines, prefetch_count, debounce_ms):
    """Update configuration settings"""
    settings = get_settings()
    changes = []

    if capitalization is not None:
        settings.game.capitalization = capitalization
        changes.append(f"Capitalization: {capitalization}")

    if punctuation is not None:
        settings.game.punctuation = punctuation
        changes.append(f"Punctuation: {punctuation}")

    if excerpt_lines is not None:
        settings.game.excerpt_lines = excerpt_lines
        changes.append(f"Excerpt lines: {excerpt_lines}")

    if prefetch_count is not None:
        settings.queue.prefetch_count = prefetch_count
        changes.append(f"Prefetch count: {prefetch_count}")

    if debounce_ms is not None:
        settings.search.debounce_ms = debounce_ms
        changes.append(f"Search debounce: {debounce_ms}ms")

    if not changes:
        click.echo("No changes specified")
        return

    problems = settings.validate()
    if problems:
        for problem in problems:
            click.echo(click.style(f"Invalid: {problem}", fg='red'), err=True)
        sys.exit(1)

    path = settings.save_config()
    click.echo(f"Configuration updated ({path}):")
    for change in changes:
        click.echo(f"   • {change}")


if __name__ == '__main__':
    cli()
