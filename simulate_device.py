"""
RGB Sensor Simulator

Posts noisy color readings to the backend the way the sensor board does:
one {red, green, blue} JSON body every few seconds.
"""
import argparse
import random
import time

import requests

URL = "http://localhost:8000/api/measurements"

BASE_COLORS = {
    "red": (200, 30, 25),
    "green": (40, 150, 45),
    "blue": (30, 45, 190),
    "yellow": (220, 210, 40),
    "white": (235, 235, 230),
}


def noisy_reading(base, jitter):
    """Base color with uniform per-channel noise, kept inside 1..255."""
    return {
        channel: max(1, min(255, value + random.randint(-jitter, jitter)))
        for channel, value in zip(("red", "green", "blue"), base)
    }


def run_simulation(url, color, interval, jitter, count=None):
    print(f"Starting RGB sensor simulation ({color}) -> {url}")
    print("Press Ctrl+C to stop.")

    sent = 0
    try:
        while count is None or sent < count:
            data = noisy_reading(BASE_COLORS[color], jitter)
            try:
                resp = requests.post(url, json=data, timeout=5)
                if resp.status_code != 201:
                    print(f"Error: {resp.status_code} {resp.text}")
                else:
                    record = resp.json()
                    print(f"Sent -> id={record['id']:<6} R:{data['red']:<3} G:{data['green']:<3} B:{data['blue']:<3}")
            except requests.exceptions.RequestException as e:
                print(f"Connection Error: {e}")

            sent += 1
            time.sleep(interval)

    except KeyboardInterrupt:
        print("\nSimulation Stopped.")


def main():
    parser = argparse.ArgumentParser(description="Simulate an RGB color sensor")
    parser.add_argument("--url", default=URL)
    parser.add_argument("--color", choices=sorted(BASE_COLORS), default="red")
    parser.add_argument("--interval", type=float, default=5.0, help="seconds between readings")
    parser.add_argument("--jitter", type=int, default=12, help="max per-channel noise")
    parser.add_argument("--count", type=int, default=None, help="stop after N readings")
    args = parser.parse_args()

    run_simulation(args.url, args.color, args.interval, args.jitter, args.count)


if __name__ == "__main__":
    main()
