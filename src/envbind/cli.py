from __future__ import annotations

import argparse
import dataclasses
import importlib
import json
import logging
import os
from typing import Any, Dict, List, Sequence

import yaml

from envbind.introspect import VarInfo, get_all_vars, validate_required
from envbind.parser import enable_debug_logging, parse_with_prefix
from envbind.utils import env_flag, setup_logging

LOGGER = logging.getLogger("envbind.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="envbind", description="Inspect and load environment-bound dataclasses")
    parser.add_argument(
        "--log-level",
        default=os.getenv("ENVBIND_LOG_LEVEL", "WARNING"),
        help="Logging level (defaults to ENVBIND_LOG_LEVEL or WARNING).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    vars_parser = subparsers.add_parser("vars", help="List the variables a dataclass reads")
    vars_parser.add_argument("target", help="Dataclass to inspect, as package.module:ClassName")
    vars_parser.add_argument("--prefix", default="", help="Prefix prepended to every variable name.")
    vars_parser.add_argument("--format", default="table", choices=["table", "json", "yaml"], help="Output format.")
    vars_parser.add_argument("--required-only", action="store_true", help="Only list required variables.")

    check_parser = subparsers.add_parser("check", help="Verify that every required variable is set")
    check_parser.add_argument("target", help="Dataclass to check, as package.module:ClassName")
    check_parser.add_argument("--prefix", default="", help="Prefix prepended to every variable name.")

    parse_parser = subparsers.add_parser("parse", help="Parse the environment and print the resulting values")
    parse_parser.add_argument("target", help="Dataclass to populate, as package.module:ClassName")
    parse_parser.add_argument("--prefix", default="", help="Prefix prepended to every variable name.")
    parse_parser.add_argument("--format", default="json", choices=["json", "yaml"], help="Output format.")

    return parser


def load_target(spec: str) -> type:
    """Import ``package.module:ClassName`` and return the dataclass it names.

    Raises:
        ValueError: If ``spec`` is malformed or does not name a dataclass.
    """
    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"Target must look like package.module:ClassName, got {spec!r}")
    target: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        target = getattr(target, part)
    if not isinstance(target, type) or not dataclasses.is_dataclass(target):
        raise ValueError(f"Target {spec!r} is not a dataclass")
    return target


def render_vars(found: Sequence[VarInfo], fmt: str) -> str:
    rows = [dataclasses.asdict(info) for info in found]
    if fmt == "json":
        return json.dumps(rows, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(rows, sort_keys=False).rstrip()

    headers = ["NAME", "TYPE", "REQUIRED", "DEFAULT", "FIELD"]
    table: List[List[str]] = [headers]
    for info in found:
        table.append([info.name, info.type, "yes" if info.required else "no", info.default, info.field_path])
    widths = [max(len(row[i]) for row in table) for i in range(len(headers))]
    return "\n".join("  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in table)


def render_values(instance: Any, fmt: str) -> str:
    payload = _plain(dataclasses.asdict(instance))
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False).rstrip()
    return json.dumps(payload, indent=2)


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if hasattr(value, "geturl"):
        return value.geturl()
    return str(value)


def _run_vars(args: argparse.Namespace) -> None:
    found = get_all_vars(load_target(args.target), args.prefix)
    if args.required_only:
        found = [info for info in found if info.required]
    print(render_vars(found, args.format))


def _run_check(args: argparse.Namespace) -> None:
    validate_required(load_target(args.target), args.prefix)
    print("All required variables are set.")


def _run_parse(args: argparse.Namespace) -> None:
    instance = load_target(args.target)()
    parse_with_prefix(instance, args.prefix)
    print(render_values(instance, args.format))


_COMMANDS: Dict[str, Any] = {
    "vars": _run_vars,
    "check": _run_check,
    "parse": _run_parse,
}


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if env_flag("ENVBIND_DEBUG"):
        setup_logging(logging.INFO)
        enable_debug_logging(LOGGER.info)
    else:
        setup_logging(args.log_level)

    handler = _COMMANDS.get(args.command)
    if handler is None:
        parser.error(f"Unknown command: {args.command}")
    try:
        handler(args)
    except Exception as err:
        raise SystemExit(f"envbind {args.command} failed: {err}") from None
