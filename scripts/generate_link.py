import argparse
import logging

from slipgen.core.logging import setup_logging
from slipgen.workers.tasks import generate_link_sync


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one link generation attempt for a slip")
    parser.add_argument("--slip-id", required=True, help="Slip UUID")
    return parser.parse_args()


def main() -> int:
    setup_logging(logging.INFO)
    args = parse_args()
    result = generate_link_sync(args.slip_id)
    if result.get("code") in {"not_found", "in_progress"}:
        print(f"Not started: {result['error']}")
        return 1

    print(f"Status: {result['status']}")
    if result.get("url"):
        print(f"Link: {result['url']}")
    for entry in result.get("logs", []):
        print(f"  [{entry['level']}] {entry['timestamp']} {entry['message']}")
    return 0 if result["ok"] else 2


if __name__ == "__main__":
    raise SystemExit(main())
