import threading
import time
from dataclasses import dataclass

import numpy as np

from kdfpow.config import BENCHMARK_CHALLENGE, BENCHMARK_TRIALS
from kdfpow.errors import Cancelled, InvalidParameter
from kdfpow.puzzle import solve_challenge, validate_difficulty
from kdfpow.utils import Normalization, logging


@dataclass(frozen=True)
class BenchResults:
    avg_guess_count: float
    avg_time_taken_ms: float
    trials: int


def benchmark_solver(
    difficulty: float,
    trials: int = BENCHMARK_TRIALS,
    challenge: str = BENCHMARK_CHALLENGE,
    normalization: Normalization = Normalization.EXACT,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> BenchResults:
    """
    Solve the same challenge ``trials`` times in a row and average the cost.
    The first failing trial fails the whole run. ``timeout`` (seconds) is one
    deadline shared by all trials.
    """
    validate_difficulty(difficulty)
    if isinstance(trials, bool) or not isinstance(trials, int) or trials <= 0:
        raise InvalidParameter(
            "trials must be a positive integer", field="trials", value=trials
        )
    if timeout is not None and timeout <= 0:
        raise InvalidParameter(
            "timeout must be positive", field="timeout", value=timeout
        )

    guess_counts = np.zeros(trials, dtype=np.int64)
    times_ms = np.zeros(trials, dtype=np.float64)
    deadline = None if timeout is None else time.perf_counter() + timeout
    for i in range(trials):
        remaining = None
        if deadline is not None:
            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                logging.warning(f"Benchmark timed out after {i} trials")
                raise Cancelled(f"benchmark timed out after {timeout}s")
        result = solve_challenge(
            challenge,
            difficulty,
            normalization=normalization,
            cancel=cancel,
            timeout=remaining,
        )
        guess_counts[i] = result.guess_count
        times_ms[i] = result.time_taken_ms

    results = BenchResults(
        avg_guess_count=float(guess_counts.mean()),
        avg_time_taken_ms=float(times_ms.mean()),
        trials=trials,
    )
    logging.info(f"avg Guess Count: {results.avg_guess_count}")
    logging.info(f"avg Time Taken (ms): {results.avg_time_taken_ms}")
    return results
