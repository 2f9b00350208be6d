"""Runs capture cycles once or at a fixed interval."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Optional

from screenlapse.core.errors import ConfigError
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger

from .cycle import CaptureCycle, CycleResult, SleepFunc

Clock = Callable[[], datetime]


class Scheduler:
    """Drive a :class:`CaptureCycle`.

    With ``interval == 0`` a single cycle runs. Otherwise the first cycle runs
    immediately and the scheduler then sleeps ``interval`` seconds after each
    completed cycle, so a slow cycle pushes the next one back instead of
    overlapping it. Errors from a cycle end the run.
    """

    def __init__(
        self,
        cycle: CaptureCycle,
        interval: int,
        *,
        clock: Clock = datetime.now,
        sleep: SleepFunc = asyncio.sleep,
        logger: LoggerLike = None,
    ) -> None:
        if interval < 0:
            raise ConfigError(f"interval must be >= 0 seconds, got {interval}")
        self.cycle = cycle
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)
        self.cycles_completed = 0

    async def run_cycle(self) -> CycleResult:
        timestamp = self._clock().replace(microsecond=0)
        result = await self.cycle.run(timestamp)
        self.cycles_completed += 1
        return result

    async def run(self, max_cycles: Optional[int] = None) -> int:
        """Run until interrupted (or ``max_cycles``). Returns cycles completed."""
        if self.interval == 0:
            self.logger.debug("Capturing once")
            await self.run_cycle()
            return self.cycles_completed

        self.logger.info("Capturing every %d seconds", self.interval)
        while True:
            await self.run_cycle()
            if max_cycles is not None and self.cycles_completed >= max_cycles:
                return self.cycles_completed
            self.logger.debug("Sleeping for %d seconds", self.interval)
            await self._sleep(self.interval)


__all__ = ["Clock", "Scheduler"]
