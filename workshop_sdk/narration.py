"""
Soroban Workshop SDK - Console Narration

Banners, step headers and amount formatting for the workshop scripts.
"""

import sys
import time
from typing import Optional

from .payloads import from_units


def banner(title: str, width: int = 70):
    print(title)
    print("=" * width)


def step(number: Optional[int], title: str, width: int = 40):
    """Print a step header, e.g. 'STEP 1: Creating a Wallet'."""
    label = f"STEP {number}: {title}" if number is not None else title
    print(f"\n{label}")
    print("=" * width)


def format_amount(stroops: int, symbol: str = "") -> str:
    """10_0000000 -> '10.0000000 XLM'"""
    text = f"{from_units(stroops):.7f}"
    return f"{text} {symbol}" if symbol else text


def format_countdown(seconds: int) -> str:
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}:{remaining:02d}" if minutes > 0 else f"{remaining}"


def countdown(seconds: int, message: str = "Next step in"):
    """Blocking countdown rendered on one console line."""
    print(f"\n{message}:")
    for left in range(seconds, 0, -1):
        sys.stdout.write(f"\r{format_countdown(left)} seconds remaining...")
        sys.stdout.flush()
        time.sleep(1)
    print("\nReady to proceed!\n")


def print_error(error: Exception, title: str = "Workshop Error"):
    """Print an error and the HTTP response body attached to it, if any."""
    print(f"\n{title}: {error}", file=sys.stderr)
    response = getattr(error, "response", None)
    payload = getattr(error, "payload", None)
    if response is not None:
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
    if payload:
        print(f"Error details: {payload}", file=sys.stderr)
