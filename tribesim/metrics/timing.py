"""Performance timing instrumentation for tribesim runs."""

from dataclasses import dataclass


@dataclass
class DayTiming:
    """Timing breakdown for a single simulated day."""

    checks_ms: float = 0.0
    events_ms: float = 0.0
    buildings_ms: float = 0.0
    agents_ms: float = 0.0
    periodic_ms: float = 0.0
    total_ms: float = 0.0
    agents_acted: int = 0


class PerformanceMonitor:
    """Tracks per-phase timing of ``advance_day``."""

    def __init__(self):
        self._day_timings: list[DayTiming] = []

    def record_day(self, timing: DayTiming) -> None:
        self._day_timings.append(timing)

    @property
    def days_recorded(self) -> int:
        return len(self._day_timings)

    @property
    def summary(self) -> dict:
        if not self._day_timings:
            return {}
        n = len(self._day_timings)
        acted = sum(t.agents_acted for t in self._day_timings)
        return {
            "total_days": n,
            "avg_day_ms": sum(t.total_ms for t in self._day_timings) / n,
            "avg_checks_ms": sum(t.checks_ms for t in self._day_timings) / n,
            "avg_events_ms": sum(t.events_ms for t in self._day_timings) / n,
            "avg_buildings_ms": sum(t.buildings_ms for t in self._day_timings) / n,
            "avg_agents_ms": sum(t.agents_ms for t in self._day_timings) / n,
            "avg_periodic_ms": sum(t.periodic_ms for t in self._day_timings) / n,
            "slowest_day_ms": max(t.total_ms for t in self._day_timings),
            "avg_agent_us": round(
                sum(t.agents_ms for t in self._day_timings) * 1000 / max(1, acted), 2
            ),
        }
