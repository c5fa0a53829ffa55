from __future__ import annotations

import argparse
import os


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the return-URL smoke runner."""
    parser = argparse.ArgumentParser(description="Return-URL token smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--timeout", type=float, default=20.0, help="health wait in seconds")
    parser.add_argument(
        "--account-type",
        default="individual",
        choices=("company", "individual", "business"),
        help="account type used for the redirect check",
    )
    return parser.parse_args(argv)
