import time
from typing import Any, Callable
from core.exceptions import FatalSyncError
from core.logging_config import LoggerMixin

class Scheduler(LoggerMixin):
    """
    Runs a job once immediately, then every `interval` seconds.

    Single threaded: a job that overruns its period pushes the next tick back
    instead of starting a second run. There is no stop switch; the loop ends
    only on FatalSyncError or when the process is interrupted.
    """

    def __init__(self, job: Callable[[], Any], interval: float,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.job = job
        self.interval = interval
        self.sleep = sleep
        self.clock = clock
        self.runs = 0
        self.failures = 0

    def run_once(self) -> None:
        self.runs += 1
        try:
            self.job()
        except FatalSyncError:
            raise
        except Exception as e:
            self.failures += 1
            self.logger.error("Cycle failed", error=str(e), error_type=type(e).__name__, run=self.runs)

    def run_forever(self) -> None:
        self.logger.info("Scheduler started", interval=self.interval)
        next_run = self.clock()
        while True:
            self.run_once()
            next_run += self.interval
            now = self.clock()
            if next_run <= now:
                # Overran the period: run again now and re-anchor.
                next_run = now
                continue
            self.sleep(next_run - now)
