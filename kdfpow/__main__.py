import argparse
import sys

from kdfpow.bench import benchmark_solver
from kdfpow.config import BENCHMARK_CHALLENGE, BENCHMARK_TRIALS
from kdfpow.errors import InvalidParameter, PuzzleError
from kdfpow.puzzle import KdfPuzzle
from kdfpow.utils import Normalization


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kdfpow",
        description="Solve, verify and benchmark PBKDF2 proof-of-work challenges.",
    )
    parser.add_argument("command", choices=["solve", "verify", "bench"])
    parser.add_argument(
        "--challenge",
        type=str,
        default=None,
        help=(
            "Challenge string"
            f" (default: hard_challenge, {BENCHMARK_CHALLENGE} for bench)"
        ),
    )
    parser.add_argument("--difficulty", type=float, default=1000)
    parser.add_argument("--solution", type=str, help="Solution to verify")
    parser.add_argument("--trials", type=int, default=BENCHMARK_TRIALS)
    parser.add_argument("--timeout", type=float, default=None, help="Seconds")
    parser.add_argument(
        "--normalization",
        choices=[mode.value for mode in Normalization],
        default=Normalization.EXACT.value,
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    normalization = Normalization(args.normalization)

    try:
        if args.command == "bench":
            results = benchmark_solver(
                args.difficulty,
                args.trials,
                args.challenge or BENCHMARK_CHALLENGE,
                normalization,
                timeout=args.timeout,
            )
            print(f"avg Guess Count: {results.avg_guess_count}")
            print(f"avg Time Taken (ms): {results.avg_time_taken_ms}")
            return 0

        puzzle = KdfPuzzle(args.difficulty, normalization, timeout=args.timeout)
        challenge = args.challenge or "hard_challenge"
        if args.command == "verify":
            if args.solution is None:
                parser.error("verify requires --solution")
            valid = puzzle.verify(challenge, args.solution)
            print(f"Valid: {valid}")
            return 0 if valid else 1

        solution = puzzle.solve(challenge)
        print(f"Solution: {solution.solution}")
        print(f"Guess Count: {solution.guess_count}")
        print(f"Time Taken (ms): {solution.time_taken_ms}")
        return 0
    except InvalidParameter as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except PuzzleError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
