"""Run the legacy challenge processor: ``python -m legacy_processor``."""

from legacy_processor.workers.challenge_worker import run_challenge_worker

if __name__ == "__main__":
    run_challenge_worker()
