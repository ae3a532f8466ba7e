#!/usr/bin/env python3
"""Print a fresh BOOKING_ENCRYPTION_KEY (64 hex characters, AES-256)."""

import argparse
from pathlib import Path
import sys
from typing import Optional

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from courtbook.core.reference_codec import generate_key


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a booking reference encryption key")
    parser.add_argument(
        "--env",
        action="store_true",
        help="Print as a .env line instead of the bare key",
    )
    args = parser.parse_args(argv)

    key = generate_key()
    if args.env:
        print(f"BOOKING_ENCRYPTION_KEY={key}")
    else:
        print(key)
        print(
            "Store it as BOOKING_ENCRYPTION_KEY. Changing it invalidates every "
            "reference already issued.",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
