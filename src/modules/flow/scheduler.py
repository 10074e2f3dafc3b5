import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..logging import BaseLogger

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]


class BatchScheduler:
    """Runs a fixed number of executions in sequential, concurrency-bounded waves.

    A wave starts only after every execution of the previous wave finished.
    """

    def __init__(self, total: int, concurrency: int, logger: BaseLogger):
        """
        Args:
            total: Number of executions to run
            concurrency: Maximum number of executions in flight (wave size)
            logger: Logger instance
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if total < 0:
            raise ValueError(f"total must not be negative, got {total}")
        self.total = total
        self.concurrency = concurrency
        self.logger = logger
        self.active = 0
        self.peak_active = 0

    def wave_sizes(self) -> List[int]:
        """Sizes of the waves the run is split into."""
        return [
            min(self.concurrency, self.total - start)
            for start in range(0, self.total, self.concurrency)
        ]

    async def run(
        self,
        execution: Callable[[], Awaitable[T]],
        on_wave_complete: Optional[ProgressCallback] = None
    ) -> List[T]:
        """
        Run `execution` total times.

        Args:
            execution: Factory returning a new awaitable for each instance
            on_wave_complete: Called with (completed, total) after each wave drains

        Returns:
            Results of the executions that did not raise, in launch order
        """
        semaphore = asyncio.Semaphore(self.concurrency)
        results: List[T] = []
        completed = 0

        async def gated() -> T:
            async with semaphore:
                self.active += 1
                self.peak_active = max(self.peak_active, self.active)
                try:
                    return await execution()
                finally:
                    self.active -= 1

        waves = self.wave_sizes()
        for wave_index, size in enumerate(waves):
            self.logger.log_debug(f"Starting wave {wave_index + 1}/{len(waves)} with {size} instances")
            wave_results = await asyncio.gather(*(gated() for _ in range(size)), return_exceptions=True)

            for result in wave_results:
                if isinstance(result, BaseException):
                    self.logger.log_error(f"Execution failed unexpectedly: {str(result)}")
                else:
                    results.append(result)

            completed += size
            if on_wave_complete:
                on_wave_complete(completed, self.total)

        return results
