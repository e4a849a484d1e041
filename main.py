#!/usr/bin/env python3
"""
Airport Security Times Monitor - Main Entry Point

Starts the polling daemon that records the per-terminal security queue
times from the airport departures page.

Usage:
    python main.py            # poll every 10 minutes until killed
    python main.py --once     # run a single cycle and exit
"""

import argparse
import sys


def main():
    parser = argparse.ArgumentParser(description="Airport Security Times Monitor")

    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--env-file", default=None, help="Load settings from this .env file")

    args = parser.parse_args()

    from services.security_daemon import run_daemon
    sys.exit(run_daemon(once=args.once, dotenv_path=args.env_file))


if __name__ == "__main__":
    main()
