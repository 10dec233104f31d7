from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from seczetta_risk.config.settings import RuleConfig
from seczetta_risk.rule.context import AuthContext, User
from seczetta_risk.rule.hook import grab_risk_score

EXIT_DENIED = 3


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="seczetta-risk", description="SecZetta risk rule CLI")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG|INFO|WARNING|ERROR)")
    sub = p.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", help="Run the rule for one user/context pair")
    ev.add_argument("--user", required=True, help="JSON file with the user record")
    ev.add_argument("--context", help="JSON file with the transaction context")

    sub.add_parser("config", help="Print the parsed configuration (API key masked)")

    return p


def _read_json(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise SystemExit(f"evaluate failed: file not found: {path}")
    data = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"evaluate failed: expected a JSON object in {path}")
    return data


def cmd_evaluate(args, config: RuleConfig) -> int:
    user = User.from_dict(_read_json(args.user))
    context = AuthContext.from_dict(_read_json(args.context) if args.context else {})

    result = grab_risk_score(user, context, config)

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0 if result.ok else EXIT_DENIED


def main(argv: Optional[list[str]] = None, environ: Optional[Dict[str, str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    config = RuleConfig.from_env(environ)

    if args.command == "evaluate":
        return cmd_evaluate(args, config)

    elif args.command == "config":
        print(json.dumps(config.redacted(), indent=2))
        return 0

    raise SystemExit(f"Unknown command: {args.command}")


if __name__ == "__main__":
    raise SystemExit(main())
