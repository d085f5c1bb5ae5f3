"""
Service state management and service call generation.
"""

import random
from datetime import datetime, timedelta
from typing import Any

from .models import FaultType

ERROR_RESPONSES = ("500", "502", "503")


class ServiceState:
    """Tracks the state of an application service"""

    def __init__(
        self,
        service_name: str,
        rng: random.Random,
        base_call_seconds: float = 8.0,
        call_probability: float = 0.3,
    ):
        self.service_name = service_name
        self.rng = rng
        self.call_probability = call_probability

        # Base values
        self.base_duration = base_call_seconds * rng.uniform(0.8, 1.2)

        # Active fault
        self.active_fault: FaultType | None = None
        self.fault_remaining: int = 0

    @property
    def duration_std(self) -> float:
        # std of uniform(0.9, 1.1) noise
        return self.base_duration * 0.2 / (12 ** 0.5)

    def inject(self, fault: FaultType, duration_steps: int) -> None:
        self.active_fault = fault
        self.fault_remaining = duration_steps

    def generate_call(self, timestamp: datetime) -> dict[str, Any] | None:
        """Possibly start a call at timestamp, as a raw service call record"""
        call = None
        if self.rng.random() < self.call_probability:
            duration_mult = 1.0
            error_probability = 0.0
            if self.active_fault == FaultType.LATENCY_SPIKE:
                duration_mult = self.rng.uniform(5.0, 15.0)
            elif self.active_fault == FaultType.ERROR_BURST:
                error_probability = 0.8

            duration = self.base_duration * duration_mult * self.rng.uniform(0.9, 1.1)
            response = "200"
            if self.rng.random() < error_probability:
                response = self.rng.choice(ERROR_RESPONSES)

            call = {
                "service": self.service_name,
                "start": timestamp.isoformat(),
                "end": (timestamp + timedelta(seconds=duration)).isoformat(),
                "response": response,
            }

        if self.active_fault is not None:
            self.fault_remaining -= 1
            if self.fault_remaining <= 0:
                self.active_fault = None
        return call
