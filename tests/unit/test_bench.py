import time
from unittest import TestCase
from unittest.mock import patch

from kdfpow.bench import BenchResults, benchmark_solver
from kdfpow.errors import Cancelled, DerivationFailure, InvalidParameter
from kdfpow.puzzle import Solution


class BenchmarkTests(TestCase):
    def test_averages(self):
        """
        Test the averages of identical trials are exact.
        """
        stub = Solution(solution="abc", guess_count=4, time_taken_ms=10.0)
        with patch("kdfpow.bench.solve_challenge", return_value=stub) as solve:
            results = benchmark_solver(10, trials=5, challenge="fixed")

        self.assertEqual(results, BenchResults(4.0, 10.0, 5))
        self.assertEqual(solve.call_count, 5)
        for call in solve.call_args_list:
            self.assertEqual(call.args, ("fixed", 10))

    def test_mixed_trials(self):
        stubs = [
            Solution("a", 1, 2.0),
            Solution("b", 2, 4.0),
            Solution("c", 6, 6.0),
        ]
        with patch("kdfpow.bench.solve_challenge", side_effect=stubs):
            results = benchmark_solver(10, trials=3)

        self.assertEqual(results.avg_guess_count, 3.0)
        self.assertEqual(results.avg_time_taken_ms, 4.0)

    def test_default_challenge(self):
        stub = Solution("a", 1, 1.0)
        with patch("kdfpow.bench.solve_challenge", return_value=stub) as solve:
            results = benchmark_solver(10, trials=2)

        self.assertEqual(results.trials, 2)
        self.assertEqual(solve.call_args.args[0], "hard_challange")

    def test_failing_trial_fails_benchmark(self):
        stubs = [Solution("a", 1, 1.0), DerivationFailure("broken")]
        with patch("kdfpow.bench.solve_challenge", side_effect=stubs) as solve:
            with self.assertRaises(DerivationFailure):
                benchmark_solver(10, trials=5)
        self.assertEqual(solve.call_count, 2)

    def test_invalid_parameters(self):
        with patch("kdfpow.bench.solve_challenge") as solve:
            for trials in [0, -3, 2.5, True]:
                with self.assertRaises(InvalidParameter):
                    benchmark_solver(10, trials=trials)
            with self.assertRaises(InvalidParameter):
                benchmark_solver(0, trials=5)
            solve.assert_not_called()

    def test_real_run(self):
        results = benchmark_solver(2, trials=3)
        self.assertGreaterEqual(results.avg_guess_count, 1.0)
        self.assertGreaterEqual(results.avg_time_taken_ms, 0.0)

    def test_deadline_shared_by_trials(self):
        """
        Test each trial only gets what is left of the benchmark deadline.
        """
        stub = Solution("a", 1, 1.0)
        with patch("kdfpow.bench.solve_challenge", return_value=stub) as solve:
            benchmark_solver(10, trials=4, timeout=30)

        remaining = [call.kwargs["timeout"] for call in solve.call_args_list]
        self.assertEqual(len(remaining), 4)
        for value in remaining:
            self.assertGreater(value, 0)
            self.assertLessEqual(value, 30)
        self.assertEqual(remaining, sorted(remaining, reverse=True))

    def test_timeout(self):
        with patch("kdfpow.puzzle.derive_key", return_value=b"\xff" * 32):
            with self.assertRaises(Cancelled):
                benchmark_solver(10, trials=50, timeout=0.05)

    def test_deadline_spent_between_trials(self):
        def slow_solve(*args, **kwargs):
            time.sleep(0.06)
            return Solution("a", 1, 60.0)

        with patch("kdfpow.bench.solve_challenge", side_effect=slow_solve) as solve:
            with self.assertRaises(Cancelled):
                benchmark_solver(10, trials=5, timeout=0.05)
        self.assertEqual(solve.call_count, 1)

    def test_invalid_timeout(self):
        with self.assertRaises(InvalidParameter):
            benchmark_solver(10, trials=5, timeout=0)
