"""
Main experiment generator orchestrating host indicators, service calls and
fault injection.
"""

import random
from datetime import timedelta

import structlog

from src.experiments.experiment import ExperimentData
from src.experiments.loader import ExperimentRecords, load_experiments

from .models import SERVICE_FAULTS, GeneratorConfig
from .server_state import ServerState
from .service_state import ServiceState

logger = structlog.get_logger(__name__)


class ExperimentGenerator:
    """Generates synthetic experiment runs with injected faults

    Runs are reproducible: two generators built with the same seeded config
    produce the same records, run after run.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self._seeds = random.Random(config.seed)

        logger.info(
            "Initializing experiment generator",
            snapshots=config.num_snapshots,
            interval_seconds=config.interval_seconds,
            indicators=len(config.indicators),
            services=config.services,
            fault_probability=config.fault_probability,
            enabled_faults=[f.value for f in config.enabled_faults],
        )

    def generate_records(self, run_id: str) -> ExperimentRecords:
        """Generate the raw records of one run"""
        config = self.config
        rng = random.Random(self._seeds.getrandbits(64))

        server = ServerState(
            config.indicators,
            rng,
            seasonal_steps=config.seasonal_steps,
            seasonal_amplitude=config.seasonal_amplitude,
            include_derived=config.include_derived,
        )
        services = [
            ServiceState(name, rng, config.base_call_seconds, config.call_probability)
            for name in config.services
        ]

        records = ExperimentRecords(
            run_id=run_id,
            indicator_layers={p.name: p.layer.value for p in config.indicators},
        )

        for step in range(config.num_snapshots):
            timestamp = config.start_time + timedelta(seconds=step * config.interval_seconds)

            description = self._maybe_inject(rng, server, services)
            if description:
                records.injections.append(
                    {"timestamp": timestamp.isoformat(), "description": description}
                )
                logger.debug("Fault injected", run_id=run_id, step=step, fault=description)

            records.observations.append(
                {"timestamp": timestamp.isoformat(), "values": server.generate_values(step)}
            )
            for service in services:
                call = service.generate_call(timestamp)
                if call:
                    records.service_calls.append(call)

        records.service_stats = [self._service_stat(service) for service in services]
        records.timings = self._timings(rng)

        logger.info(
            "Experiment generated",
            run_id=run_id,
            snapshots=len(records.observations),
            service_calls=len(records.service_calls),
            faults=len(records.injections),
        )
        return records

    def generate_experiments(
        self, count: int, grace_seconds: float | None = None
    ) -> list[ExperimentData]:
        """Generate ``count`` runs and build them through the experiment loader"""
        records = [self.generate_records(str(i + 1)) for i in range(count)]
        return load_experiments(records, grace_seconds=grace_seconds)

    def _maybe_inject(
        self, rng: random.Random, server: ServerState, services: list[ServiceState]
    ) -> str | None:
        # one fault at a time keeps every compliance window unambiguous
        if server.active_fault or any(s.active_fault for s in services):
            return None
        if not self.config.enabled_faults or rng.random() >= self.config.fault_probability:
            return None

        fault = rng.choice(self.config.enabled_faults)
        duration = rng.randint(*self.config.fault_duration_steps)
        if fault in SERVICE_FAULTS:
            if not services:
                return None
            target = rng.choice(services)
            target.inject(fault, duration)
            return f"{fault.value}@{target.service_name}"

        server.inject(fault, duration)
        return fault.value

    def _service_stat(self, service: ServiceState) -> dict:
        """Historical statistics matching the normal behaviour of a service"""
        indicator_pair = {
            p.name: [str(p.base), str(round(p.base * p.noise, 4))] for p in self.config.indicators
        }
        return {
            "service": service.service_name,
            "duration": [str(round(service.base_duration, 4)), str(round(service.duration_std, 4))],
            "observations": [
                str(round(service.base_duration / self.config.interval_seconds, 4)),
                "1.0",
            ],
            "indicators": {
                name: {"first": pair, "last": pair, "all": pair}
                for name, pair in indicator_pair.items()
            },
        }

    def _timings(self, rng: random.Random) -> dict:
        layers = sorted({p.layer.value for p in self.config.indicators})
        return {"monitor": {layer: [rng.randint(1, 20) for _ in range(10)] for layer in layers}}

