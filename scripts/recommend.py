"""Run the recommendation engine, pre-check or policy insights from the command line.

Usage:
    python scripts/recommend.py recommend                       # Seeded pending requests
    python scripts/recommend.py recommend --requests batch.json # JSON list of requests
    python scripts/recommend.py precheck "Other" "misc supplies"
    python scripts/recommend.py insights
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pydantic import TypeAdapter  # noqa: E402

from app.config import settings  # noqa: E402
from app.schemas.funding import FundingRequest, RequestCategory  # noqa: E402
from app.services.department_service import load_department_summary  # noqa: E402
from app.services.policy.insights import build_policy_insights  # noqa: E402
from app.services.policy.knowledge_base import load_knowledge_base  # noqa: E402
from app.services.recommend.engine import build_engine  # noqa: E402
from app.services.request_store import RequestStore  # noqa: E402

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("recommend")


def _load_requests(path: Path | None) -> list[FundingRequest]:
    if path is None:
        return RequestStore().pending()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    requests = TypeAdapter(list[FundingRequest]).validate_python(data)
    logger.info("Loaded %d requests from %s", len(requests), path)
    return [r for r in requests if r.status == "Pending"]


def cmd_recommend(args: argparse.Namespace) -> str:
    requests = _load_requests(args.requests)
    result = build_engine().recommend(load_department_summary(), requests)
    return result.model_dump_json(indent=2)


def cmd_precheck(args: argparse.Namespace) -> str:
    result = load_knowledge_base().precheck(RequestCategory(args.category), args.description)
    return result.model_dump_json(indent=2)


def cmd_insights(args: argparse.Namespace) -> str:
    return build_policy_insights().model_dump_json(indent=2)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Funding request recommendation tools")
    sub = parser.add_subparsers(dest="command", required=True)

    p_rec = sub.add_parser("recommend", help="Rank pending funding requests")
    p_rec.add_argument(
        "--requests", type=Path, default=None,
        help="JSON file with a list of FundingRequest objects (default: seeded requests)",
    )
    p_rec.set_defaults(func=cmd_recommend)

    p_pre = sub.add_parser("precheck", help="Pre-submission warning for one request")
    p_pre.add_argument("category", choices=[c.value for c in RequestCategory])
    p_pre.add_argument("description")
    p_pre.set_defaults(func=cmd_precheck)

    p_ins = sub.add_parser("insights", help="Approval statistics and grey areas")
    p_ins.set_defaults(func=cmd_insights)

    args = parser.parse_args(argv)
    print(args.func(args))
    return 0


if __name__ == "__main__":
    sys.exit(main())
