"""
Compliance CLI
--------------
Usage:
    rizz-ads-compliance rules [--locale de-DE] [--platform google] [--industry finance]
    rizz-ads-compliance quick "Guaranteed results!"
    rizz-ads-compliance check "Guaranteed results!" --locale en-US --platform google --industry general [--strict]
"""
import sys
import json
import asyncio
import logging
import argparse
from typing import List, Optional

from compliance import ComplianceService, get_compliance_rules
from compliance_ai import quick_compliance_check
from compliance_states import ComplianceCheckRequest
from error_handler import RequestValidationError, RizzAdsError
from settings import settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 2
EXIT_FAILURE = 3


def setup_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_rules(args) -> int:
    _print_json(get_compliance_rules(locale=args.locale, platform=args.platform, industry=args.industry))
    return EXIT_OK


def cmd_quick(args) -> int:
    _print_json(quick_compliance_check(args.text).to_json_dict())
    return EXIT_OK


async def _run_check(request: ComplianceCheckRequest):
    async with ComplianceService.from_settings() as service:
        return await service.check_compliance(request)


def cmd_check(args) -> int:
    request = ComplianceCheckRequest(
        ad_copy=args.text,
        locale=args.locale,
        platform=args.platform,
        industry=args.industry,
        strict_mode=args.strict,
    )
    try:
        result = asyncio.run(_run_check(request))
    except RequestValidationError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_VALIDATION
    except RizzAdsError as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_FAILURE

    _print_json(result.to_json_dict())
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rizz-ads-compliance", description="Ad copy compliance checks")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    rules = sub.add_parser("rules", help="Print the rule corpus as JSON")
    rules.add_argument("--locale")
    rules.add_argument("--platform")
    rules.add_argument("--industry")
    rules.set_defaults(func=cmd_rules)

    quick = sub.add_parser("quick", help="Heuristic pre-check, no model call")
    quick.add_argument("text")
    quick.set_defaults(func=cmd_quick)

    check = sub.add_parser("check", help="Full pattern + AI compliance check")
    check.add_argument("text")
    check.add_argument("--locale", required=True)
    check.add_argument("--platform", required=True)
    check.add_argument("--industry", required=True)
    check.add_argument("--strict", action="store_true")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level.upper() if args.log_level else None)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
