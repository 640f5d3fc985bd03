"""Entry point for the tribesim simulation."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass

from tribesim import __version__
from tribesim.config import SimulationConfig
from tribesim.errors import TribesimError
from tribesim.simulation.engine import SimulationEngine
from tribesim.simulation.renderer import Renderer

USAGE = """\
Usage: python -m tribesim.main [OPTIONS]

Options:
  --days=N              Days to simulate (default: 365)
  --seed=N              Random seed (default: 42)
  --delay=S             Seconds between frames (default: 0.2)
  --fast                Set delay to 0.01s
  --headless            No per-day frames, print the summary only
  --load=PATH           Resume from a checkpoint file
  --checkpoint=N        Auto-checkpoint every N days
  --help, -h            Show this message

Environment variables (override any setting):
  TRIBESIM_SEED, TRIBESIM_MAX_DAYS, TRIBESIM_AGENTS_PER_TRIBE, TRIBESIM_LOG_LEVEL, etc.
"""


@dataclass
class RunOptions:
    """Command-line settings that are not part of ``SimulationConfig``."""

    day_delay: float = 0.2
    headless: bool = False
    checkpoint_path: str | None = None


# --name=value options that write straight into the config
CONFIG_OPTIONS = {
    "--days": ("max_days", int),
    "--seed": ("seed", int),
    "--checkpoint": ("checkpoint_interval", int),
}


def parse_args(argv: list[str], config: SimulationConfig) -> RunOptions:
    """Apply argv to ``config`` and return the remaining run options.

    Exits with status 0 after ``--help`` and 2 on an unknown or malformed option.
    """
    options = RunOptions()
    for arg in argv:
        name, _, value = arg.partition("=")
        try:
            if arg in ("--help", "-h"):
                print(f"tribesim v{__version__}")
                print()
                print(USAGE, end="")
                sys.exit(0)
            elif arg == "--fast":
                options.day_delay = 0.01
            elif arg == "--headless":
                options.headless = True
                options.day_delay = 0.0
            elif name == "--delay" and value:
                options.day_delay = float(value)
            elif name == "--load" and value:
                options.checkpoint_path = value
            elif name in CONFIG_OPTIONS and value:
                field_name, cast = CONFIG_OPTIONS[name]
                setattr(config, field_name, cast(value))
            else:
                print(f"Unknown option: {arg} (see --help)")
                sys.exit(2)
        except ValueError:
            print(f"Invalid value for {name}: {value!r}")
            sys.exit(2)
    return options


def main():
    """Run the simulation."""
    config = SimulationConfig()
    options = parse_args(sys.argv[1:], config)

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if options.checkpoint_path:
            from tribesim.persistence.checkpoint import CheckpointManager

            engine = CheckpointManager(config.checkpoint_dir).load(
                options.checkpoint_path,
                config_override={
                    "max_days": config.max_days,
                    "checkpoint_interval": config.checkpoint_interval,
                },
            )
            print(f"  Loaded checkpoint from {options.checkpoint_path} (day {engine.state.day})")
        else:
            engine = SimulationEngine(config)
            engine.setup_tribes()
    except (TribesimError, OSError) as e:
        print(f"  Error: {e}")
        sys.exit(1)

    run(engine, Renderer(), options.day_delay, options.headless)


def run(engine: SimulationEngine, renderer: Renderer, day_delay: float, headless: bool) -> None:
    """Advance days until the run is over, rendering and checkpointing as configured."""
    config = engine.config

    print(f"  tribesim v{__version__}")
    print(f"  Grid: {config.grid_size}x{config.grid_size} | Seed: {config.seed}")
    print(f"  Tribes: {', '.join(config.tribes)} | Agents: {engine.registry.count_living}")
    print(f"  Max days: {config.max_days}")
    print()

    checkpoint_mgr = None
    if config.checkpoint_interval > 0:
        from tribesim.persistence.checkpoint import CheckpointManager

        checkpoint_mgr = CheckpointManager(
            checkpoint_dir=config.checkpoint_dir,
            auto_interval=config.checkpoint_interval,
            max_checkpoints=config.checkpoint_max,
        )
        print(f"  Auto-checkpointing every {config.checkpoint_interval} days")

    # Attach timing before the first day
    perf = engine.perf_monitor

    try:
        while not engine.is_over():
            engine.advance_day()

            if checkpoint_mgr:
                saved_path = checkpoint_mgr.auto_checkpoint(engine)
                if saved_path and not headless:
                    print(f"  Checkpoint saved: {saved_path}")

            if not headless:
                renderer.print_frame(engine)
                time.sleep(day_delay)

        renderer.print_summary(engine)

        summary = perf.summary
        if summary:
            print()
            print("Performance:")
            print(
                f"  Avg day: {summary['avg_day_ms']:.2f}ms | "
                f"Slowest: {summary['slowest_day_ms']:.2f}ms | "
                f"Per agent: {summary['avg_agent_us']:.1f}us"
            )

    except KeyboardInterrupt:
        print(f"\n  Stopped at day {engine.state.day}")
        renderer.print_summary(engine)


if __name__ == "__main__":
    main()
