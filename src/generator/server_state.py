"""
Monitored host state and indicator generation.
"""

import math
import random

from .models import FAULT_EFFECTS, FaultType, IndicatorProfile


class ServerState:
    """Tracks the indicators of the monitored host over time for realistic evolution"""

    def __init__(
        self,
        profiles: list[IndicatorProfile],
        rng: random.Random,
        seasonal_steps: int = 24,
        seasonal_amplitude: float = 0.1,
        include_derived: bool = True,
    ):
        self.profiles = list(profiles)
        self.rng = rng
        self.seasonal_steps = seasonal_steps
        self.seasonal_amplitude = seasonal_amplitude
        self.include_derived = include_derived

        # Current fault state
        self.active_fault: FaultType | None = None
        self.fault_remaining: int = 0
        self._effects: dict[str, float] = {}

        self._previous: dict[str, float] = {}

    def inject(self, fault: FaultType, duration_steps: int) -> None:
        """Start a fault; its multipliers are drawn once and hold for its whole duration"""
        self.active_fault = fault
        self.fault_remaining = duration_steps
        self._effects = {
            name: self.rng.uniform(low, high)
            for name, (low, high) in FAULT_EFFECTS.get(fault, {}).items()
        }

    def generate_values(self, step: int) -> dict[str, dict[str, str]]:
        """Indicator values for one snapshot, string encoded per data category"""
        season = 1.0
        if self.seasonal_steps > 0:
            season += self.seasonal_amplitude * math.sin(2 * math.pi * step / self.seasonal_steps)

        values = {}
        for profile in self.profiles:
            variation = 1.0 + self.rng.gauss(0.0, profile.noise)
            value = max(0.0, profile.base * season * variation * self._effects.get(profile.name, 1.0))
            if profile.upper is not None:
                value = min(profile.upper, value)

            entry = {"plain": f"{value:.3f}"}
            if self.include_derived:
                previous = self._previous.get(profile.name, value)
                entry["derived"] = f"{value - previous:.3f}"
            self._previous[profile.name] = value
            values[profile.name] = entry

        self._tick()
        return values

    def _tick(self) -> None:
        if self.active_fault is None:
            return
        self.fault_remaining -= 1
        if self.fault_remaining <= 0:
            self.active_fault = None
            self._effects = {}
