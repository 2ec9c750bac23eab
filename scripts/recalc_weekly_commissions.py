from __future__ import annotations

import argparse
import json
import os
import sys

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def load_env_file(env_path: str) -> None:
    if not os.path.exists(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as env_file:
        for line in env_file:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            os.environ.setdefault(key, value)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recalculate weekly commissions and store the snapshots."
    )
    parser.add_argument(
        "--env-file",
        default=os.path.join(PROJECT_ROOT, ".env"),
        help="Path to .env file.",
    )
    parser.add_argument(
        "--scope",
        default="current-week-all",
        choices=["current-week-all", "member-week", "member-month"],
        help="Which members and weeks to recalculate.",
    )
    parser.add_argument("--member-id", default=None, help="Member id for member scopes.")
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--month", type=int, default=None)
    parser.add_argument("--week", type=int, default=None)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))

    from src.api.dependencies import get_member_commission_service
    from src.core.config import get_settings
    from src.core.logging import configure_logging
    from src.schemas.commissions import RecalculationRequest

    configure_logging(get_settings().log_level)
    service = get_member_commission_service()
    result = service.recalculate(
        RecalculationRequest(
            scope=args.scope,
            member_id=args.member_id,
            year=args.year,
            month=args.month,
            week=args.week,
        )
    )
    print(json.dumps(result.model_dump(by_alias=True), indent=2, default=str))


if __name__ == "__main__":
    main()
