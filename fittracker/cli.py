"""
fittracker/cli.py
─────────────────
Command-line front end for the fit-tracker client.

Usage:
    fit-tracker login --username alex          # prompts for password
    fit-tracker status
    fit-tracker weights list
    fit-tracker weights add 72.5 --date 2024-03-01
    fit-tracker weights edit 12 71.9
    fit-tracker weights delete 12
    fit-tracker metrics list muscle_index --from 2024-01-01
    fit-tracker metrics add muscle_index '{"index": 18.2}'
    fit-tracker profile show
    fit-tracker profile update --first-name Alex --height-cm 181
    fit-tracker muscle-index calculate
    fit-tracker logout

Set FIT_TRACKER_LOCAL=true to talk to a local mock_server instead of
production.
"""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys
from datetime import date
from typing import Any

import requests

from . import config
from .client import FitTrackerClient
from .errors import ApiError, AuthError
from .muscle_index import MUSCLE_INDEX, calculate_and_record
from .transform import index_value, muscle_index_stats, sort_by_date, weight_stats

log = logging.getLogger("fit_tracker.cli")


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


# ── commands ──────────────────────────────────────────────────────────────────

def cmd_login(client: FitTrackerClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass(f"  Password for {args.username}: ")
    try:
        client.login(args.username, password)
    except AuthError as exc:
        print(f"  ❌ Login failed: {exc.message}")
        return 1
    print(f"  ✅ Logged in as {args.username} ({config.get_environment()})")
    return 0


def cmd_logout(client: FitTrackerClient, args: argparse.Namespace) -> int:
    client.logout()
    print("  👋 Logged out.")
    return 0


def cmd_status(client: FitTrackerClient, args: argparse.Namespace) -> int:
    ok = client.is_authenticated()
    print("\nFit Tracker — Status")
    print("═" * 40)
    print(f"  Environment : {config.get_environment()}")
    print(f"  API URL     : {client.base_url}")
    print(f"  Session     : {'✅ authenticated' if ok else '❌ NOT authenticated'}")
    print("═" * 40)
    if not ok:
        print("\n  Run `fit-tracker login --username <name>` to sign in.\n")
    return 0


def cmd_weights(client: FitTrackerClient, args: argparse.Namespace) -> int:
    if args.action == "list":
        records = client.get_weights() or []
        for r in sort_by_date(records):
            print(f"  {str(r.get('id')):>6}  {str(r.get('date'))[:10]}  {r.get('weight')} kg")
        stats = weight_stats(records)
        if stats:
            print(f"\n  min {stats['min']}  max {stats['max']}  avg {stats['avg']}  "
                  f"change {stats['difference']:+} kg")
        else:
            print("  No weight records yet.")
    elif args.action == "add":
        _print_json(client.create_weight(args.weight, args.date or date.today()))
    elif args.action == "edit":
        _print_json(client.update_weight(args.id, args.weight, args.date))
    elif args.action == "delete":
        client.delete_weight(args.id)
        print(f"  🗑  Deleted weight record {args.id}")
    return 0


def cmd_metrics(client: FitTrackerClient, args: argparse.Namespace) -> int:
    if args.action == "list":
        records = client.get_metrics(args.metric_type, date_from=args.date_from,
                                     date_to=args.date_to)
        if args.metric_type != MUSCLE_INDEX:
            _print_json(records)
            return 0
        records = records or []
        for r in sort_by_date(records):
            print(f"  {str(r.get('id')):>6}  {str(r.get('date'))[:10]}  {index_value(r)}")
        stats = muscle_index_stats(records)
        if stats:
            print(f"\n  min {stats['min']}  max {stats['max']}  avg {stats['avg']}  "
                  f"change {stats['difference']:+}")
        else:
            print("  No muscle index records yet.")
    elif args.action == "add":
        _print_json(client.create_metric(args.metric_type, args.date or date.today(),
                                         _parse_value(args.value)))
    elif args.action == "edit":
        _print_json(client.update_metric(args.id, _parse_value(args.value), args.date))
    elif args.action == "delete":
        client.delete_metric(args.id)
        print(f"  🗑  Deleted metric record {args.id}")
    return 0


def cmd_profile(client: FitTrackerClient, args: argparse.Namespace) -> int:
    if args.action == "show":
        _print_json(client.get_profile())
        return 0
    fields = {
        "first_name": args.first_name,
        "last_name":  args.last_name,
        "age":        args.age,
        "gender":     args.gender,
        "height_cm":  args.height_cm,
    }
    _print_json(client.update_profile(fields))
    return 0


def cmd_muscle_index(client: FitTrackerClient, args: argparse.Namespace) -> int:
    index = calculate_and_record(client)
    print(f"  💪 Muscle index calculated: {index} (saved for today as {MUSCLE_INDEX}).")
    return 0


# ── parser ────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fit-tracker", description="Fit tracker API client")
    parser.add_argument("--api-url", help="Override the API base URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Sign in and store the access token")
    p.add_argument("--username", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Forget the stored token").set_defaults(func=cmd_logout)
    sub.add_parser("status", help="Show environment and session").set_defaults(func=cmd_status)

    w = sub.add_parser("weights", help="Weight journal")
    wsub = w.add_subparsers(dest="action", required=True)
    wsub.add_parser("list")
    wa = wsub.add_parser("add")
    wa.add_argument("weight", type=float)
    wa.add_argument("--date")
    we = wsub.add_parser("edit")
    we.add_argument("id")
    we.add_argument("weight", type=float)
    we.add_argument("--date")
    wd = wsub.add_parser("delete")
    wd.add_argument("id")
    w.set_defaults(func=cmd_weights)

    m = sub.add_parser("metrics", help="Dated metrics")
    msub = m.add_subparsers(dest="action", required=True)
    ml = msub.add_parser("list")
    ml.add_argument("metric_type")
    ml.add_argument("--from", dest="date_from")
    ml.add_argument("--to", dest="date_to")
    ma = msub.add_parser("add")
    ma.add_argument("metric_type")
    ma.add_argument("value", help="JSON value, e.g. '{\"index\": 18.2}'")
    ma.add_argument("--date")
    me = msub.add_parser("edit")
    me.add_argument("id")
    me.add_argument("value")
    me.add_argument("--date")
    md = msub.add_parser("delete")
    md.add_argument("id")
    m.set_defaults(func=cmd_metrics)

    pr = sub.add_parser("profile", help="Profile")
    prsub = pr.add_subparsers(dest="action", required=True)
    prsub.add_parser("show")
    pu = prsub.add_parser("update")
    pu.add_argument("--first-name")
    pu.add_argument("--last-name")
    pu.add_argument("--age")
    pu.add_argument("--gender")
    pu.add_argument("--height-cm")
    pr.set_defaults(func=cmd_profile)

    mi = sub.add_parser("muscle-index", help="Muscle index")
    misub = mi.add_subparsers(dest="action", required=True)
    misub.add_parser("calculate")
    mi.set_defaults(func=cmd_muscle_index)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    client = FitTrackerClient(base_url=args.api_url)
    try:
        return args.func(client, args)
    except ApiError as exc:
        print(f"  ❌ {exc.message}")
        return 1
    except ValueError as exc:
        print(f"  ❌ Invalid input: {exc}")
        return 1
    except requests.RequestException as exc:
        log.debug("Transport failure", exc_info=True)
        print(f"  ❌ Could not reach {client.base_url}: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
