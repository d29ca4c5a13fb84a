# scripts/test/trigger_simulation.py
"""
Poke a running backend: trigger a simulation tick or a location sync,
then print the live status of every location.
Usage: python scripts/test/trigger_simulation.py --mode cron --secret <CRON_SECRET>
       python scripts/test/trigger_simulation.py --mode manual --user 1
       python scripts/test/trigger_simulation.py --mode sync --secret <CRON_SECRET>
"""

import argparse
import requests

BACKEND_URL = "http://localhost:8080/api/v1"


def trigger(mode, secret, user_id):
    if mode == "cron":
        resp = requests.get(f"{BACKEND_URL}/cron/simulate-sensors",
                            headers={"Authorization": f"Bearer {secret}"}, timeout=30)
    elif mode == "sync":
        resp = requests.get(f"{BACKEND_URL}/cron/sync-locations",
                            headers={"Authorization": f"Bearer {secret}"}, timeout=60)
    else:
        resp = requests.post(f"{BACKEND_URL}/sensors/simulate",
                             headers={"X-User-Id": str(user_id)}, timeout=30)
    print(f"✅ {mode} → HTTP {resp.status_code}: {resp.json()}")


def show_locations():
    resp = requests.get(f"{BACKEND_URL}/locations", timeout=10)
    for loc in resp.json():
        status = loc.get("status")
        if not status:
            print(f"   ⚪ {loc['name']}: no sensor")
            continue
        icon = {"green": "🟢", "yellow": "🟡", "red": "🔴"}[status["color"]]
        print(f"   {icon} {loc['name']}: {status['noise_level']} ({status['noise_percentage']}%), "
              f"{status['occupancy_level']}: {status['available_seats']} seats free")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Trigger simulation / sync on a running backend")
    parser.add_argument("--mode", default="cron", choices=["cron", "manual", "sync"])
    parser.add_argument("--secret", default="")
    parser.add_argument("--user", type=int, default=1, help="Admin user id for --mode manual")
    parser.add_argument("--url", default=BACKEND_URL)
    args = parser.parse_args()

    BACKEND_URL = args.url
    trigger(args.mode, args.secret, args.user)
    show_locations()
