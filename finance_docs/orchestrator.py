"""
Live-recompute orchestration.

Every edit to a document starts a new run tagged with an increasing
generation number. Runs may overlap and finish in any order; a run only
publishes if its generation is still the latest requested one, so an older
result can never replace a newer one. In-flight runs are never aborted,
their results are simply discarded.

Run lifecycle: RUNNING -> PUBLISHED | FAILED | SUPERSEDED.
"""

import asyncio
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from .config import ORCHESTRATOR_MAX_WORKERS, logger
from .exceptions import DocumentEngineError
from .generator import generate_outputs
from .schemas import DocumentDescription, GeneratedOutputs


class RunStatus(str, Enum):
    """States of a recompute run, and of the orchestrator as a whole."""
    IDLE = "idle"
    RUNNING = "running"
    PUBLISHED = "published"
    SUPERSEDED = "superseded"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishedState:
    """
    The result currently visible to consumers.

    The generation and its outcome live in one immutable object, so a reader
    never sees a result paired with the wrong generation.
    """
    generation: int
    status: RunStatus
    outputs: Optional[GeneratedOutputs] = None
    error: Optional[str] = None
    error_codes: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.PUBLISHED


@dataclass
class Run:
    """One recompute run; ``status`` is updated by the orchestrator."""
    generation: int
    status: RunStatus = RunStatus.RUNNING
    future: Optional[Future] = None

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until a submitted run has finished (no-op for inline runs)."""
        if self.future is not None:
            self.future.result(timeout=timeout)


class RecomputeOrchestrator:
    """
    Coordinates document generation against a changing input.

    Args:
        generator: Function producing outputs for a document
            (defaults to generate_outputs)
        max_workers: Thread pool size used by submit() and recompute_async()
    """

    def __init__(
        self,
        generator: Callable[[DocumentDescription], GeneratedOutputs] = generate_outputs,
        max_workers: int = ORCHESTRATOR_MAX_WORKERS,
    ):
        self._generator = generator
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._generation = 0
        self._published: Optional[PublishedState] = None
        self._in_flight: dict[int, Run] = {}
        self._executor: Optional[ThreadPoolExecutor] = None

    # ========================================================================
    # State
    # ========================================================================

    @property
    def latest_generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def current(self) -> Optional[PublishedState]:
        """The published state, or None while nothing has been published."""
        with self._lock:
            return self._published

    @property
    def state(self) -> RunStatus:
        """IDLE until the first run resolves, then PUBLISHED or FAILED."""
        with self._lock:
            return self._published.status if self._published else RunStatus.IDLE

    # ========================================================================
    # Run Lifecycle
    # ========================================================================

    def begin(self) -> Run:
        """Start a new generation; every run still in flight is superseded."""
        with self._lock:
            self._generation += 1
            for stale in self._in_flight.values():
                stale.status = RunStatus.SUPERSEDED
            self._in_flight.clear()
            run = Run(generation=self._generation)
            self._in_flight[run.generation] = run
        return run

    def complete(
        self,
        run: Run,
        outputs: Optional[GeneratedOutputs] = None,
        error: Optional[BaseException] = None,
    ) -> bool:
        """
        Compare-and-publish the outcome of a run.

        Returns:
            True if the outcome was published, False if the run was superseded
        """
        with self._lock:
            if run.generation != self._generation:
                run.status = RunStatus.SUPERSEDED
                logger.debug(f"Discarding result of generation {run.generation} (latest {self._generation})")
                return False

            if error is None:
                state = PublishedState(generation=run.generation, status=RunStatus.PUBLISHED, outputs=outputs)
            else:
                state = PublishedState(
                    generation=run.generation,
                    status=RunStatus.FAILED,
                    error=str(error),
                    error_codes=list(getattr(error, "errors", [])),
                )
            self._published = state
            run.status = state.status
            self._in_flight.pop(run.generation, None)
            return True

    def _execute(self, run: Run, doc: DocumentDescription) -> bool:
        try:
            outputs = self._generator(doc)
        except DocumentEngineError as e:
            return self.complete(run, error=e)
        except Exception as e:
            logger.exception(f"Recompute generation {run.generation} crashed")
            return self.complete(run, error=e)
        return self.complete(run, outputs=outputs)

    # ========================================================================
    # Execution
    # ========================================================================

    def recompute(self, doc: DocumentDescription) -> Run:
        """Run a new generation in the calling thread."""
        run = self.begin()
        self._execute(run, doc)
        return run

    def submit(self, doc: DocumentDescription) -> Run:
        """Run a new generation on the worker pool; returns immediately."""
        run = self.begin()
        run.future = self._pool().submit(self._execute, run, doc)
        return run

    async def recompute_async(self, doc: DocumentDescription) -> Run:
        """Run a new generation on the worker pool and await its completion."""
        run = self.begin()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self._pool(), self._execute, run, doc)
        return run

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="recompute",
                )
            return self._executor

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker pool."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def __enter__(self) -> "RecomputeOrchestrator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
