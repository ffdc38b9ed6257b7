import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import List, Optional, Protocol, Sequence
from ..ingestion.schema import CycleSummary
from ..utils.logging import get_logger

logger = get_logger(__name__)

class CycleJob(Protocol):
    def run(self) -> CycleSummary:
        ...

class GuardedCycle:
    """Runs a job at most once at a time; overlapping triggers are dropped."""

    def __init__(self, name: str, job: CycleJob):
        self.name = name
        self.job = job
        self._running = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running.locked()

    def trigger(self) -> Optional[CycleSummary]:
        if not self._running.acquire(blocking=False):
            logger.warning(f"{self.name} sync still running, skipping this trigger")
            return None
        try:
            return self.job.run()
        except Exception:
            logger.exception(f"{self.name} sync crashed")
            return None
        finally:
            self._running.release()

class IntervalScheduler:
    """Fires every cycle once per interval, starting immediately.

    Triggers are handed to a thread pool so one vendor's slow cycle neither
    delays the other vendor nor the next tick.
    """

    def __init__(self, cycles: Sequence[GuardedCycle], interval_s: float, workers: Optional[int] = None):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")
        self.cycles = list(cycles)
        self.interval_s = interval_s
        # two slots per cycle: a running cycle plus an overlapping trigger
        self.workers = workers or max(1, 2 * len(self.cycles))
        self.executor = self._new_executor()
        self._executor_closed = False
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.ticks = 0

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="sync")

    def tick(self) -> List[Future]:
        self.ticks += 1
        return [self.executor.submit(cycle.trigger) for cycle in self.cycles]

    def _loop(self) -> None:
        logger.info(f"Scheduler started (interval={self.interval_s}s, cycles={[c.name for c in self.cycles]})")
        while not self._stop.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("Scheduler tick failed, retrying next interval")
            self._stop.wait(self.interval_s)
        logger.info("Scheduler stopped")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        if self._executor_closed:
            self.executor = self._new_executor()
            self._executor_closed = False
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="sync-scheduler", daemon=True)
        self._thread.start()

    def stop(self, wait: bool = True) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self.executor.shutdown(wait=wait, cancel_futures=not wait)
        self._executor_closed = True

    def run_forever(self) -> None:
        self.start()
        try:
            while not self._stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted, waiting for running cycles to finish")
        finally:
            self.stop(wait=True)
