import asyncio
import threading
from dataclasses import asdict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kdfpow.api.serializers import (
    BenchResource,
    ErrorResource,
    SolutionResource,
    SolveRequest,
    VerifyRequest,
    VerifyResource,
)
from kdfpow.bench import benchmark_solver
from kdfpow.config import BENCHMARK_TRIALS, MAX_DIFFICULTY, PORT, SOLVE_TIMEOUT
from kdfpow.errors import Cancelled, DerivationFailure, InvalidParameter, PuzzleError
from kdfpow.puzzle import KdfPuzzle
from kdfpow.utils import logging

# Seconds between client disconnect checks while a search runs.
DISCONNECT_POLL = 0.5

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
)


def _error_response(status_code: int, exc: PuzzleError) -> JSONResponse:
    resource = ErrorResource(
        error=exc.__class__.__name__,
        message=exc.message,
        details={k: repr(v) if k == "value" else v for k, v in exc.details.items()},
    )
    return JSONResponse(status_code=status_code, content=asdict(resource))


@app.exception_handler(InvalidParameter)
async def on_invalid_parameter(request: Request, exc: InvalidParameter):
    return _error_response(422, exc)


@app.exception_handler(Cancelled)
async def on_cancelled(request: Request, exc: Cancelled):
    return _error_response(408, exc)


@app.exception_handler(DerivationFailure)
async def on_derivation_failure(request: Request, exc: DerivationFailure):
    logging.error(f"{request.url.path}: {exc.message}")
    return _error_response(500, exc)


def _check_difficulty_cap(difficulty: float) -> None:
    if difficulty > MAX_DIFFICULTY:
        raise InvalidParameter(
            f"difficulty above the server limit of {MAX_DIFFICULTY}",
            field="difficulty",
            value=difficulty,
        )


async def _run_cancellable(request: Request, func, *args, **kwargs):
    cancel = threading.Event()
    task = asyncio.ensure_future(
        run_in_threadpool(func, *args, cancel=cancel, **kwargs)
    )
    try:
        while not task.done():
            if await request.is_disconnected():
                logging.info(f"{request.url.path}: client disconnected, cancelling")
                cancel.set()
                break
            await asyncio.wait({task}, timeout=DISCONNECT_POLL)
        return await task
    finally:
        cancel.set()


@app.post("/solve")
async def solve(request: Request, body: SolveRequest) -> SolutionResource:
    timeout = min(body.timeout or SOLVE_TIMEOUT, SOLVE_TIMEOUT)
    puzzle = KdfPuzzle(body.difficulty, timeout=timeout)
    _check_difficulty_cap(body.difficulty)
    solution = await _run_cancellable(request, puzzle.solve, body.challenge)
    return SolutionResource(
        solution=solution.solution,
        guess_count=solution.guess_count,
        time_taken_ms=solution.time_taken_ms,
    )


@app.post("/verify")
async def verify(body: VerifyRequest) -> VerifyResource:
    puzzle = KdfPuzzle(body.difficulty)
    valid = await run_in_threadpool(puzzle.verify, body.challenge, body.solution)
    return VerifyResource(valid=valid)


@app.get("/benchmark")
async def benchmark(
    request: Request, difficulty: float, trials: int = BENCHMARK_TRIALS
) -> BenchResource:
    _check_difficulty_cap(difficulty)
    results = await _run_cancellable(
        request, benchmark_solver, difficulty, trials, timeout=SOLVE_TIMEOUT
    )
    return BenchResource(
        avg_guess_count=results.avg_guess_count,
        avg_time_taken_ms=results.avg_time_taken_ms,
        trials=results.trials,
    )


if __name__ == "__main__":
    uvicorn.run(app, port=PORT)
