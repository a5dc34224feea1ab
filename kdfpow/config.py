import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE")
SOLVE_TIMEOUT = float(os.getenv("SOLVE_TIMEOUT", 30))
BENCHMARK_TRIALS = int(os.getenv("BENCHMARK_TRIALS", 50))
BENCHMARK_CHALLENGE = os.getenv("BENCHMARK_CHALLENGE", "hard_challange")
MAX_DIFFICULTY = float(os.getenv("MAX_DIFFICULTY", 1_000_000))
PORT = int(os.getenv("PORT", 8000))
