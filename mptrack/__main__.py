from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .client import Client
from .config import load_settings
from .errors import ConfigurationError, InvalidArgument, MixpanelError
from .logs import setup_logging

logger = logging.getLogger(__name__)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_pairs(pairs: Sequence[str]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        parsed[key] = _parse_value(value)
    return parsed


def _parse_time(raw: str) -> Union[int, float, datetime]:
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        return float(raw)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid time {raw!r}: use epoch seconds or ISO-8601") from exc


def _pair(raw: str) -> Tuple[str, Any]:
    return next(iter(_parse_pairs([raw]).items()))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mptrack", description="Send events and profile updates to Mixpanel.")
    parser.add_argument("--token", help="Project token (default: $MPTRACK_TOKEN)")
    parser.add_argument("--key", help="API key required by import (default: $MPTRACK_API_KEY)")
    parser.add_argument("--debug", action="store_true", default=None, help="Log outgoing data")
    parser.add_argument("--test", action="store_true", default=None, help="Send requests with test=1")
    sub = parser.add_subparsers(dest="command", required=True)

    track = sub.add_parser("track", help="Track an event")
    track.add_argument("event")
    track.add_argument("-p", "--prop", dest="props", action="append", type=_pair, default=[])

    imp = sub.add_parser("import", help="Import a historical event")
    imp.add_argument("event")
    imp.add_argument("time", type=_parse_time)
    imp.add_argument("-p", "--prop", dest="props", action="append", type=_pair, default=[])

    for name, help_text in (("set", "Set profile properties"), ("increment", "Increment profile properties")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("distinct_id")
        cmd.add_argument("pairs", nargs="+", type=_pair)

    charge = sub.add_parser("charge", help="Record a charge on a profile")
    charge.add_argument("distinct_id")
    charge.add_argument("amount")

    for name, help_text in (("clear-charges", "Clear a profile's charges"), ("delete-user", "Delete a profile")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("distinct_id")

    return parser


async def _run(client: Client, args: argparse.Namespace) -> Optional[Exception]:
    if args.command == "track":
        await client.track(args.event, dict(args.props))
    elif args.command == "import":
        await client.import_event(args.event, args.time, dict(args.props))
    elif args.command == "set":
        await client.people.set_many(args.distinct_id, dict(args.pairs))
    elif args.command == "increment":
        await client.people.increment_many(args.distinct_id, dict(args.pairs))
    elif args.command == "charge":
        return await client.people.track_charge(args.distinct_id, args.amount)
    elif args.command == "clear-charges":
        await client.people.clear_charges(args.distinct_id)
    elif args.command == "delete-user":
        await client.people.delete_user(args.distinct_id)
    return None


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()

    debug = settings.debug if args.debug is None else args.debug
    test = settings.test if args.test is None else args.test
    setup_logging(debug)

    token = args.token or settings.token
    if not token:
        parser.error("a project token is required: pass --token or set MPTRACK_TOKEN")

    client = Client(token, {"debug": debug, "test": test, "key": args.key or settings.api_key})
    try:
        failure = asyncio.run(_run(client, args))
    except (ConfigurationError, InvalidArgument) as exc:
        logger.error("%s", exc)
        return 2
    except MixpanelError as exc:
        logger.error("Request failed: %s", exc)
        return 1
    return 1 if failure else 0


if __name__ == "__main__":
    raise SystemExit(main())
