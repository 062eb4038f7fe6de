"""Command line interface for brainlook.

Adds commands to create a room and to play in one from the terminal.
"""

from __future__ import annotations

import asyncio
import threading

import rich_click as click
from rich.console import Console
from rich.panel import Panel

from brainlook.cli.view import TerminalView, scoreboard_table, settings_line
from brainlook.config import ClientConfig
from brainlook.core.logging import configure_logging
from brainlook.exceptions import ProvisioningError, SessionStateError, TransportError
from brainlook.realtime.messages import in_bounds
from brainlook.services.provisioning import RoomProvisioningClient
from brainlook.services.session import GameSession

console = Console()

HELP_TEXT = "Type a guess and press enter. Commands: /settings MIN MAX INTERVAL, /scores, /quit"


@click.group(name="brainlook", help="Play brainlook word-guessing games from the terminal.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, default=False, help="Emit logs as JSON")
@click.option("--host", default=None, help="Game server host[:port] (overrides BRAINLOOK_BACKEND_HOST)")
@click.option("--tls/--no-tls", default=None, help="Use https/wss (overrides BRAINLOOK_USE_TLS)")
@click.pass_context
def cli(ctx: click.Context, debug: bool, json_logs: bool, host: str | None, tls: bool | None) -> None:
    """Play brainlook word-guessing games from the terminal."""
    configure_logging(debug=debug, json_logs=json_logs)
    config = ClientConfig()
    if host:
        config.backend_host = host
    if tls is not None:
        config.use_tls = tls
    ctx.obj = config


@cli.command(name="create-room", help="Create a new room and print its share link.")
@click.pass_obj
def create_room(config: ClientConfig) -> None:
    """Create a new room and print its share link."""

    async def _create() -> tuple[str, str]:
        async with RoomProvisioningClient(config) as client:
            code = await client.create_room()
            return code, client.share_link(code)

    try:
        room_code, link = asyncio.run(_create())
    except ProvisioningError as e:
        console.print(f"[red]There was an error creating the room:[/red] {e}")
        raise SystemExit(1) from e

    console.print(
        Panel(
            f"Room code: [bold]{room_code}[/bold]\nShare this link with your friends:\n{link}",
            title="Room created",
        )
    )


@cli.command(name="play", help="Join a room and play in the terminal.")
@click.argument("room_code")
@click.argument("name")
@click.pass_obj
def play(config: ClientConfig, room_code: str, name: str) -> None:
    """Join a room and play in the terminal."""
    try:
        error = asyncio.run(run_game(config, room_code, name))
    except ProvisioningError as e:
        console.print(f"[red]Could not join room {room_code}:[/red] {e}")
        raise SystemExit(1) from e
    except (TransportError, SessionStateError) as e:
        console.print(f"[red]Could not connect:[/red] {e}")
        raise SystemExit(1) from e

    if error is not None:
        # Already reported by the disconnect listener in run_game.
        raise SystemExit(1)


class LineReader:
    """Reads terminal lines on a daemon thread and hands them to the event loop.

    The thread is a daemon so a read still blocked on stdin when the game ends
    does not hold up process exit. ``None`` is delivered on end of input.
    """

    def __init__(self, source: Console) -> None:
        self._source = source
        self._loop = asyncio.get_running_loop()
        self._lines: asyncio.Queue[str | None] = asyncio.Queue()
        self._thread = threading.Thread(target=self._run, name="brainlook-input", daemon=True)

    def start(self) -> None:
        self._thread.start()

    async def readline(self) -> str | None:
        """Wait for the next line, or None once input has ended."""
        return await self._lines.get()

    def _run(self) -> None:
        while True:
            try:
                line: str | None = self._source.input()
            except (EOFError, KeyboardInterrupt):
                line = None
            try:
                self._loop.call_soon_threadsafe(self._lines.put_nowait, line)
            except RuntimeError:
                # Event loop already closed.
                return
            if line is None:
                return


async def run_game(config: ClientConfig, room_code: str, name: str) -> TransportError | None:
    """Run an interactive session until the user quits or the connection drops.

    Returns:
        The transport error that ended the session, or None if the user quit.
    """
    async with GameSession(room_code, config=config) as session:
        session.state.subscribe(TerminalView(console))
        await session.join(name)
        session.on_disconnect(lambda error: console.print(f"[red]Disconnected:[/red] {error}"))
        console.print(f"[green]Joined room {room_code} as {name}.[/green] {HELP_TEXT}")

        reader = LineReader(console)
        reader.start()
        closed = asyncio.create_task(session.wait_closed())
        try:
            while session.is_open:
                line = asyncio.create_task(reader.readline())
                done, _ = await asyncio.wait({line, closed}, return_when=asyncio.FIRST_COMPLETED)
                if closed in done:
                    line.cancel()
                    break
                text = line.result()
                if text is None:
                    break
                try:
                    if not await handle_input(session, text.strip()):
                        break
                except TransportError:
                    break
        finally:
            closed.cancel()

    return session.error


async def handle_input(session: GameSession, text: str) -> bool:
    """Apply one line of user input.

    Returns:
        False if the user asked to quit, True otherwise.
    """
    if not text:
        return True
    if text == "/quit":
        return False
    if text == "/scores":
        console.print(scoreboard_table(session.state.snapshot.ranked_players()))
        console.print(settings_line(session.state.settings))
        return True
    if text.startswith("/settings"):
        parts = text.split()[1:]
        try:
            min_length, max_length, interval = (int(p) for p in parts)
        except ValueError:
            console.print("[yellow]Usage: /settings MIN MAX INTERVAL[/yellow]")
            return True
        requested = {"min_length": min_length, "max_length": max_length, "interval_seconds": interval}
        outside = [name for name, value in requested.items() if not in_bounds(name, value)]
        if outside:
            console.print(f"[yellow]Outside the usual range: {', '.join(outside)}. The server may adjust them.[/yellow]")
        await session.change_settings(min_length, max_length, interval)
        return True

    session.state.set_pending_guess(text)
    await session.submit_guess()
    return True


if __name__ == "__main__":
    cli()
