"""
User interface module for the gacha simulator.

Provides the console front end: a prompt_toolkit command loop with
autocompletion, rich tables for the inventory and statistics, and a spinner
showing the cosmetic preview while a roll animates.
"""

import shlex

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from rich.console import Console
from rich.status import Status

from gachasim.app import GachaApp
from gachasim.core.utils import clamp_int, crule
from gachasim.engine.orchestrator import RollState
from gachasim.storage.event_bus import GachaEventType, RollPreviewEvent
from gachasim.ui.sheets import (
    print_inventory_sheet,
    print_odds_sheet,
    print_pool_sheet,
    print_roll_result,
    print_stats_sheet,
)

PUBLIC_COMMANDS = ["roll", "ack", "inv", "dec", "rm", "stats", "debug", "help", "quit"]
DEBUG_COMMANDS = ["count", "reset", "pool", "odds"]

HELP_TEXT = {
    "roll": "roll [n]        roll n times (default: the roll count)",
    "ack": "ack             hide the last result",
    "inv": "inv [query]     show the inventory, optionally filtered",
    "dec": "dec <name>      remove one unit of an item",
    "rm": "rm <name>       remove an item entirely",
    "stats": "stats           show the roll statistics",
    "debug": "debug on|off    toggle the debug menu",
    "count": "count <n>       set the roll count (1-10000)",
    "reset": "reset           clear inventory and statistics",
    "pool": "pool            show the current pool",
    "odds": "odds            show the rarity odds",
    "help": "help            show this help",
    "quit": "quit            exit",
}

console = Console()


class GachaCLI:
    """
    Command-line front end of one client context.

    Attributes:
        app (GachaApp): The application state container.

    """

    def __init__(self, app: GachaApp) -> None:
        self.app = app
        # one session keeps history
        self.session: PromptSession = PromptSession()
        self._status: Status | None = None
        self.app.bus.subscribe(GachaEventType.ROLL_PREVIEW, self._on_preview)
        self.app.debug.on_debug_change(self._on_debug_change)

    # ---- Event handlers ----

    def _on_preview(self, event: RollPreviewEvent) -> None:
        if self._status is not None:
            self._status.update(f"Rolling… {event.item.colored_name}")

    def _on_debug_change(self, on: bool) -> None:
        console.print(f"[yellow]Debug menu {'enabled' if on else 'disabled'}.[/]")

    # ---- Prompting ----

    def available_commands(self) -> list[str]:
        if self.app.get_debug_flag():
            return PUBLIC_COMMANDS + DEBUG_COMMANDS
        return list(PUBLIC_COMMANDS)

    def _prompt_text(self) -> str:
        result = self.app.orchestrator.result
        if result is not None:
            return f"[{result.first_item.name}] > "
        return f"ROLL x{self.app.roll_count} > "

    async def confirm(self, message: str) -> bool:
        answer = await self.session.prompt_async(f"{message} [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    async def run(self) -> None:
        """Runs the command loop until `quit` or end of input."""
        crule("Gacha Simulator", style="bold green")
        if self.app.pool_is_fallback:
            console.print("[yellow]Pool source unavailable; using the offline pool.[/]")
        console.print("Type [bold]help[/] for the list of commands.")
        while True:
            # Pick up changes written by other processes sharing the profile.
            self.app.handle.area.refresh()
            completer = WordCompleter(self.available_commands(), ignore_case=True)
            try:
                line = await self.session.prompt_async(self._prompt_text(), completer=completer)
            except (EOFError, KeyboardInterrupt):
                break
            if not await self.handle_command(line):
                break

    async def handle_command(self, line: str) -> bool:
        """
        Executes one command line.

        Args:
            line (str): The raw input.

        Returns:
            bool: False when the loop must stop.

        """
        try:
            parts = shlex.split(line)
        except ValueError:
            console.print("[red]Unbalanced quotes.[/]")
            return True
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]
        if command not in self.available_commands():
            console.print(f"[red]Unknown command '{command}'.[/]")
            return True
        if command == "quit":
            return False
        handler = getattr(self, f"_cmd_{command}")
        await handler(args)
        return True

    # ---- Commands ----

    async def _cmd_help(self, args: list[str]) -> None:
        for command in self.available_commands():
            console.print(f"  {HELP_TEXT[command]}")

    async def _cmd_roll(self, args: list[str]) -> None:
        count = clamp_int(args[0], 1, self.app.settings.max_roll_count) if args else None
        if self.app.roll_state is RollState.SETTLED:
            # Same as the roll button: the press only hides the result.
            await self.app.click(count)
            console.print("[dim]Result hidden. Roll again to draw.[/]")
            return
        if not self.app.can_roll:
            if self.app.loading:
                console.print("[red]Rolling is disabled while the pool is loading.[/]")
            else:
                console.print("[red]The pool is empty; rolling is disabled.[/]")
            return
        try:
            with console.status("Rolling…", spinner="dots") as status:
                self._status = status
                result = await self.app.click(count)
        finally:
            self._status = None
        if result is not None:
            print_roll_result(result)

    async def _cmd_ack(self, args: list[str]) -> None:
        if not self.app.acknowledge_result():
            console.print("[dim]Nothing to hide.[/]")

    async def _cmd_inv(self, args: list[str]) -> None:
        print_inventory_sheet(self.app.get_inventory_entries(" ".join(args)))

    async def _cmd_dec(self, args: list[str]) -> None:
        if not args:
            console.print("[red]Usage: dec <name>[/]")
            return
        name = " ".join(args)
        if name not in self.app.get_inventory_snapshot():
            console.print(f"[red]{name} is not in the inventory.[/]")
            return
        count = self.app.adjust_inventory(name, -1)
        console.print(f"{name}: {count}")

    async def _cmd_rm(self, args: list[str]) -> None:
        if not args:
            console.print("[red]Usage: rm <name>[/]")
            return
        name = " ".join(args)
        if not self.app.remove_from_inventory(name):
            console.print(f"[red]{name} is not in the inventory.[/]")

    async def _cmd_stats(self, args: list[str]) -> None:
        print_stats_sheet(self.app.get_stats(), self.app.total_items())

    async def _cmd_debug(self, args: list[str]) -> None:
        if not args or args[0].lower() not in ("on", "off"):
            console.print(f"Debug is {'on' if self.app.get_debug_flag() else 'off'}.")
            return
        self.app.set_debug_flag(args[0].lower() == "on")

    async def _cmd_count(self, args: list[str]) -> None:
        if args:
            self.app.set_roll_count(clamp_int(args[0], 1, self.app.settings.max_roll_count))
        console.print(f"Roll count: x{self.app.roll_count}")

    async def _cmd_reset(self, args: list[str]) -> None:
        answer = await self.confirm("Clear all gacha inventory and stats?")
        if self.app.reset_all(lambda _: answer):
            console.print("[green]Inventory and statistics cleared.[/]")

    async def _cmd_pool(self, args: list[str]) -> None:
        print_pool_sheet(self.app.get_visible_pool(), self.app.pool_is_fallback)

    async def _cmd_odds(self, args: list[str]) -> None:
        print_odds_sheet(self.app.rarity_odds())
