"""Rich terminal renderer for the tribe simulation."""

from __future__ import annotations

import io
import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from tribesim.simulation.engine import SimulationEngine

# Message type -> rich style for the message panel
MESSAGE_STYLES = {
    "chat": "white",
    "trade": "cyan",
    "diplomacy": "yellow",
    "combat": "red",
    "celebration": "green",
}


def _make_console() -> Console:
    """Create a Rich Console that works on Windows (force UTF-8)."""
    if sys.platform == "win32" and hasattr(sys.stdout, "buffer"):
        utf8_stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")
        return Console(file=utf8_stdout, force_terminal=True)
    return Console()


class Renderer:
    """Draws one frame per day and a summary at the end of a run."""

    def __init__(self, message_lines: int = 8, console: Console | None = None):
        self.console = console or _make_console()
        self.message_lines = message_lines

    def render_frame(self, engine: SimulationEngine) -> str:
        """Render one frame of the simulation as a string."""
        parts = [
            self._render_header(engine),
            "",
            self._render_grid(engine),
            "",
            self._render_tribes(engine),
            "",
            self._render_messages(engine),
        ]
        return "\n".join(parts)

    # --- Header ---

    def _render_header(self, engine: SimulationEngine) -> str:
        day = engine.state.day
        alive = engine.registry.count_living
        dead = engine.registry.count_dead
        header = f"  tribesim | Day {day:>4} | Alive: {alive} | Dead: {dead}"
        if engine.state.victory:
            header += f" | Winner: {engine.state.victory.winner}"
        return header

    # --- Grid ---

    def _render_grid(self, engine: SimulationEngine) -> str:
        """Agents as upper-case tribe initials, claimed cells in lower case."""
        size = engine.config.grid_size
        occupied: dict[tuple[int, int], str] = {}
        for agent in engine.get_alive_agents():
            occupied.setdefault((agent.x, agent.y), agent.tribe[:1].upper())

        lines = []
        for y in range(size):
            row = "  "
            for x in range(size):
                if (x, y) in occupied:
                    row += occupied[(x, y)]
                else:
                    owner = engine.territory.owner(x, y)
                    row += owner[:1].lower() if owner else "."
                row += " "
            lines.append(row.rstrip())
        return "\n".join(lines)

    # --- Tribes ---

    def _render_tribes(self, engine: SimulationEngine) -> str:
        lines = ["  === Tribes ==="]
        for tribe in engine.tribes:
            totals = engine.tribe_total_resources(tribe)
            lines.append(
                f"  {tribe:>8} | Members: {engine.tribe_agent_count(tribe):>3} | "
                f"Food: {totals['food']:>7.0f} | Mat: {totals['materials']:>6.0f} | "
                f"Know: {totals['knowledge']:>5.0f} | Land: {engine.territory_count(tribe):>3} | "
                f"Tech: {engine.researched_tech_count(tribe):>2}"
            )
        return "\n".join(lines)

    # --- Messages ---

    def _render_messages(self, engine: SimulationEngine) -> str:
        recent = engine.get_recent_messages(self.message_lines)
        if not recent:
            return "  Messages: (none)"

        lines = ["  === Messages ==="]
        for msg in recent:
            lines.append(f"  [{msg.type.value}] {msg.agent_name}: {msg.content}")
        return "\n".join(lines)

    # --- Output ---

    def print_frame(self, engine: SimulationEngine) -> None:
        """Clear and print the current frame."""
        self.console.clear()
        self.console.print(self.render_frame(engine), markup=False, highlight=False)

    def build_summary_table(self, engine: SimulationEngine) -> Table:
        """Per-tribe results table for the end-of-run summary."""
        table = Table(title="Tribes")
        table.add_column("Tribe")
        table.add_column("Alive", justify="right")
        table.add_column("Dead", justify="right")
        table.add_column("Top level", justify="right")
        table.add_column("Territory", justify="right")
        table.add_column("Tech", justify="right")
        table.add_column("Buildings", justify="right")
        table.add_column("Can research")

        for tribe in engine.tribes:
            everyone = engine.registry.by_tribe(tribe, alive_only=False)
            alive = [a for a in everyone if a.alive]
            top_level = max((a.level for a in alive), default=0)
            table.add_row(
                tribe,
                str(len(alive)),
                str(len(everyone) - len(alive)),
                str(top_level),
                str(engine.territory_count(tribe)),
                str(engine.researched_tech_count(tribe)),
                str(engine.completed_building_count(tribe)),
                ", ".join(t.id for t in engine.tech_trees[tribe].available()) or "-",
            )
        return table

    def print_summary(self, engine: SimulationEngine) -> None:
        """Print end-of-simulation summary."""
        self.console.print("\n  [bold cyan]═══ tribesim — SIMULATION COMPLETE ═══[/bold cyan]")
        self.console.print(f"  Duration: {engine.state.day} days")
        self.console.print(f"  Agents alive: {engine.registry.count_living}")
        self.console.print(f"  Agents dead: {engine.registry.count_dead}")
        self.console.print(self.build_summary_table(engine))

        leaders = engine.currency.richest(5)
        if leaders:
            self.console.print("\n  [bold]Token leaders:[/bold]")
            for account in leaders:
                agent = engine.registry.get(account.agent_id)
                name = agent.name if agent else account.agent_id
                self.console.print(f"    {name:>20} ({account.tribe}) {account.balance:>8.0f}")

        unlocked = engine.achievements.unlocked()
        if unlocked:
            self.console.print(f"\n  [bold]Achievements: {len(unlocked)} unlocked[/bold]")
            for achievement in unlocked:
                self.console.print(f"    {achievement.name}: {achievement.description}")

        victory = engine.state.victory
        if victory:
            self.console.print(
                f"\n  [bold green]VICTORY ({victory.condition}):[/bold green] {victory.reason}"
            )
        else:
            self.console.print("\n  No tribe achieved victory.")
