from __future__ import annotations

import math
import random
import string
import threading
import time
from dataclasses import dataclass
from typing import Generic, TypeVar

from kdfpow.errors import Cancelled, InvalidParameter
from kdfpow.utils import Normalization, derive_key, logging, normalize_key, threshold

# Changing any of these breaks compatibility with deployed verifiers.
ITERATIONS = 100
KEY_LENGTH = 32
SEED_GUESS = "as good as any"

ALPHABET = string.digits + string.ascii_lowercase
Answer = TypeVar("Answer")


class Puzzle(Generic[Answer]):
    def compute(self, challenge: str) -> Answer:
        raise NotImplementedError

    def verify(self, challenge: str, answer: Answer) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Solution:
    solution: str
    guess_count: int
    time_taken_ms: float


def validate_difficulty(difficulty: float) -> float:
    """Reject difficulties whose threshold ``1 / difficulty`` is not in (0, 1)."""
    if isinstance(difficulty, bool) or not isinstance(difficulty, int | float):
        raise InvalidParameter(
            "difficulty must be a number", field="difficulty", value=difficulty
        )
    if isinstance(difficulty, float) and not math.isfinite(difficulty):
        raise InvalidParameter(
            "difficulty must be finite", field="difficulty", value=difficulty
        )
    if difficulty <= 0:
        raise InvalidParameter(
            "difficulty must be positive", field="difficulty", value=difficulty
        )
    if difficulty <= 1:
        raise InvalidParameter(
            "difficulty must be greater than 1, every guess would be accepted",
            field="difficulty",
            value=difficulty,
        )
    return difficulty


def random_guess(rng: random.Random, length: int) -> str:
    # Not a secret, a non-cryptographic generator is enough to avoid repeats.
    return "".join(rng.choices(ALPHABET, k=length))


def accepts(key: bytes, difficulty: float, normalization: Normalization) -> bool:
    return normalize_key(key, normalization) < threshold(difficulty, normalization)


def solve_challenge(
    challenge: str,
    difficulty: float,
    *,
    normalization: Normalization = Normalization.EXACT,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
    rng: random.Random | None = None,
) -> Solution:
    """Search for a guess whose derived key scores below ``1 / difficulty``.

    The loop has no iteration cap. ``cancel`` and ``timeout`` (seconds) are
    checked before every derivation and raise ``Cancelled`` when tripped.
    Each call draws guesses from its own generator unless ``rng`` is given.
    """
    validate_difficulty(difficulty)
    if timeout is not None and timeout <= 0:
        raise InvalidParameter(
            "timeout must be positive", field="timeout", value=timeout
        )

    target = threshold(difficulty, normalization)
    rng = rng or random.Random()
    guess = SEED_GUESS
    guess_length = len(SEED_GUESS.encode("utf-8"))
    guess_count = 0

    start = time.perf_counter()
    deadline = None if timeout is None else start + timeout
    logging.debug(f"Solving {challenge!r} at difficulty {difficulty}")

    while True:
        if cancel is not None and cancel.is_set():
            logging.warning(f"Solve cancelled after {guess_count} guesses")
            raise Cancelled("solve cancelled", guess_count=guess_count)
        if deadline is not None and time.perf_counter() >= deadline:
            logging.warning(f"Solve timed out after {guess_count} guesses")
            raise Cancelled(
                f"solve timed out after {timeout}s", guess_count=guess_count
            )

        key = derive_key(challenge, guess, ITERATIONS, KEY_LENGTH)
        guess_count += 1
        if normalize_key(key, normalization) < target:
            time_taken_ms = (time.perf_counter() - start) * 1000
            logging.info(
                f"Solved {challenge!r} with {guess!r} after {guess_count} guesses"
                f" ({time_taken_ms:.1f} ms)"
            )
            return Solution(guess, guess_count, time_taken_ms)

        guess = random_guess(rng, guess_length)


def verify_solution(
    challenge: str,
    solution: str,
    difficulty: float,
    normalization: Normalization = Normalization.EXACT,
) -> bool:
    validate_difficulty(difficulty)
    key = derive_key(challenge, solution, ITERATIONS, KEY_LENGTH)
    return accepts(key, difficulty, normalization)


class KdfPuzzle(Puzzle[str]):
    def __init__(
        self,
        difficulty: float,
        normalization: Normalization = Normalization.EXACT,
        timeout: float | None = None,
    ) -> None:
        self.difficulty = validate_difficulty(difficulty)
        self.normalization = normalization
        self.timeout = timeout

    def solve(self, challenge: str, cancel: threading.Event | None = None) -> Solution:
        return solve_challenge(
            challenge,
            self.difficulty,
            normalization=self.normalization,
            cancel=cancel,
            timeout=self.timeout,
        )

    def compute(self, challenge: str) -> str:
        return self.solve(challenge).solution

    def verify(self, challenge: str, answer: str) -> bool:
        return verify_solution(challenge, answer, self.difficulty, self.normalization)
