from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Dict

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
    parser = argparse.ArgumentParser(description="Export the goals-vs-actual report for one advisor as JSON.")
    parser.add_argument("--email", required=True, help="E-mail of the advisor requesting the report.")
    parser.add_argument("--from-key", default=None, help="First month, YYYY-MM (default: rolling window start).")
    parser.add_argument("--to-key", default=None, help="Last month, YYYY-MM (default: current month).")
    parser.add_argument(
        "--advisor-user-id",
        default=None,
        help="Advisor to report on (default: the requesting advisor).",
    )
    parser.add_argument("--team", action="store_true", help="Aggregate the whole team into one row per month.")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Environment file path (default: .env).",
    )
    return parser.parse_args()


def export_report(args: argparse.Namespace) -> Dict[str, Any]:
    from advisory_monitor.api.dependencies import get_advisors_repository, get_report_service
    from advisory_monitor.core.logging import configure_logging
    from advisory_monitor.schemas.reports import ReportFilters

    configure_logging(os.environ.get("LOG_LEVEL"))
    advisor = get_advisors_repository().get_by_email(args.email)
    if advisor is None:
        raise RuntimeError(f"No advisor found for {args.email}")

    filters = ReportFilters(
        from_key=args.from_key,
        to_key=args.to_key,
        advisor_user_id=args.advisor_user_id,
        team=args.team,
    )
    report, _ = get_report_service().get_goals_vs_actual(advisor, filters)
    return report.model_dump(by_alias=True)


def main() -> None:
    args = parse_args()
    load_env_file(os.path.abspath(args.env_file))

    if not os.environ.get("SUPABASE_URL") or not os.environ.get("SUPABASE_SERVICE_ROLE_KEY"):
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env")

    result = export_report(args)
    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
