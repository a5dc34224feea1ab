from dataclasses import dataclass


@dataclass
class SolveRequest:
    challenge: str
    difficulty: float
    timeout: float | None = None


@dataclass
class VerifyRequest:
    challenge: str
    solution: str
    difficulty: float


@dataclass
class SolutionResource:
    solution: str
    guess_count: int
    time_taken_ms: float


@dataclass
class VerifyResource:
    valid: bool


@dataclass
class BenchResource:
    avg_guess_count: float
    avg_time_taken_ms: float
    trials: int


@dataclass
class ErrorResource:
    error: str
    message: str
    details: dict
