# scripts/simulate_sensors.py
"""
Run the sensor simulation outside the API process.
Usage: python scripts/simulate_sensors.py            # one tick
       python scripts/simulate_sensors.py --loop     # tick every SIMULATION_INTERVAL_SECONDS
       python scripts/simulate_sensors.py --seed 42  # reproducible draws
"""

import sys
import os
import argparse
import random
import time
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.config import settings
from app.database import session_scope
from app.services.simulation_service import run_simulation


def run_once(rng):
    with session_scope() as db:
        result = run_simulation(db, rng=rng)
    print(f"✅ {result.timestamp:%H:%M:%S}: updated {result.updated}, skipped {result.skipped}")


def main():
    parser = argparse.ArgumentParser(description="Simulate sensor updates")
    parser.add_argument("--loop", action="store_true", help="Keep running on the configured interval")
    parser.add_argument("--interval", type=int, default=settings.SIMULATION_INTERVAL_SECONDS)
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    print("📡 Starting sensor simulation...")
    run_once(rng)
    while args.loop:
        time.sleep(args.interval)
        run_once(rng)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n🛑 Stopped")
