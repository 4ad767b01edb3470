"""
Tool: Pomodoro Timer
Purpose: Work/break countdown math for focus sessions

The countdown itself is driven by whoever owns the clock (a UI loop, the
CLI). This module only tracks phase and remaining time and reports when
a phase finishes, so finishing a work phase can be turned into XP.

Usage:
    cycle = PomodoroCycle.from_settings(settings)
    cycle.start()
    finished = cycle.tick(60)   # -> ["work"] once the work phase ends
    print(format_remaining_time(cycle.remaining_seconds))
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from focusforge.focus import DEFAULT_BREAK_MINUTES, DEFAULT_WORK_MINUTES, PHASES


def minutes_to_seconds(minutes: float) -> int:
    return max(0, math.floor(minutes * 60))


def format_remaining_time(seconds: int) -> str:
    """Format seconds as MM:SS. Negative input shows 00:00."""
    clamped = max(0, int(seconds))
    return f"{clamped // 60:02d}:{clamped % 60:02d}"


def next_phase(phase: str) -> str:
    return "break" if phase == "work" else "work"


def duration_for_phase(phase: str, work_minutes: float, break_minutes: float) -> int:
    if phase == "work":
        return minutes_to_seconds(work_minutes)
    return minutes_to_seconds(break_minutes)


@dataclass
class PomodoroCycle:
    """
    A work/break cycle.

    Attributes:
        work_minutes: Length of a work phase
        break_minutes: Length of a break phase
        auto_start: Start the next phase automatically when one ends
        phase: "work" or "break"
        remaining_seconds: Time left in the current phase
        running: Whether tick() advances the clock
        completed_work_sessions: Work phases finished so far
    """
    work_minutes: float = DEFAULT_WORK_MINUTES
    break_minutes: float = DEFAULT_BREAK_MINUTES
    auto_start: bool = False
    phase: str = "work"
    remaining_seconds: int = field(default=0)
    running: bool = False
    completed_work_sessions: int = 0

    def __post_init__(self):
        if self.phase not in PHASES:
            raise ValueError(f"Invalid phase. Must be one of: {PHASES}")
        if self.remaining_seconds <= 0:
            self.remaining_seconds = self._phase_duration(self.phase)

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "PomodoroCycle":
        """Build a cycle from normalized LocalSettings."""
        return cls(
            work_minutes=settings["pomodoroWorkMinutes"],
            break_minutes=settings["pomodoroBreakMinutes"],
            auto_start=settings["pomodoroAutoStartNextSession"],
        )

    def _phase_duration(self, phase: str) -> int:
        # At least one second so a zero-length phase can't stall tick()
        return max(1, duration_for_phase(phase, self.work_minutes, self.break_minutes))

    def start(self) -> None:
        self.running = True

    def pause(self) -> None:
        self.running = False

    def reset(self) -> None:
        """Back to the start of a stopped work phase. Completed count is kept."""
        self.phase = "work"
        self.remaining_seconds = self._phase_duration("work")
        self.running = False

    def skip(self) -> str:
        """Abandon the current phase without completing it."""
        self.phase = next_phase(self.phase)
        self.remaining_seconds = self._phase_duration(self.phase)
        self.running = self.auto_start
        return self.phase

    def tick(self, seconds: int = 1) -> List[str]:
        """
        Advance the clock.

        Args:
            seconds: Elapsed time to apply

        Returns:
            Phases that finished during this tick, in order
        """
        finished: List[str] = []
        seconds = max(0, int(seconds))

        while self.running and seconds > 0:
            step = min(seconds, self.remaining_seconds)
            self.remaining_seconds -= step
            seconds -= step

            if self.remaining_seconds == 0:
                finished.append(self.phase)
                if self.phase == "work":
                    self.completed_work_sessions += 1
                self.phase = next_phase(self.phase)
                self.remaining_seconds = self._phase_duration(self.phase)
                self.running = self.auto_start

        return finished

    @property
    def display(self) -> str:
        return format_remaining_time(self.remaining_seconds)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["display"] = self.display
        return data


__all__ = [
    "PomodoroCycle",
    "duration_for_phase",
    "format_remaining_time",
    "minutes_to_seconds",
    "next_phase",
]
