"""CLI entrypoint for folioscope."""

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from folioscope.auth.provider import AuthProvider
from folioscope.auth.session import SessionState
from folioscope.config.loader import get_filter_config, load_config
from folioscope.currency.rates import CurrencyRates
from folioscope.display.styles import adx_style
from folioscope.hydra.cache import CacheService
from folioscope.hydra.data_provider import HydraDataProvider
from folioscope.hydra.filter_mapping import Filter, FilterOperator, Sorter, build_query_string, map_filters, map_sorters
from folioscope.hydra.http_client import HydraHttpClient, HydraHttpError
from folioscope.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

DEFAULT_SESSION_PATH = Path.home() / ".folioscope" / "session.json"

LIST_OPERATORS = (FilterOperator.IN.value, FilterOperator.BETWEEN.value)


def parse_filter_arg(raw: str) -> Filter:
    """
    Parse ``field:operator:value``.

    ``in`` and ``between`` values are comma separated lists; every other
    operator keeps the value verbatim (so ``visScore:eq:10,50`` stays a range
    string).
    """
    parts = raw.split(":", 2)
    if len(parts) != 3 or not parts[0] or not parts[1]:
        raise argparse.ArgumentTypeError(f"Invalid filter '{raw}', expected field:operator:value")
    field, operator, value = parts
    parsed: Any = value
    if operator in LIST_OPERATORS:
        parsed = [_coerce_scalar(v.strip()) for v in value.split(",")]
    return Filter(field=field, operator=operator, value=parsed)


def parse_sort_arg(raw: str) -> Sorter:
    field, _, order = raw.partition(":")
    order = order or "asc"
    if order not in ("asc", "desc"):
        raise argparse.ArgumentTypeError(f"Invalid sort order '{order}', expected asc or desc")
    return Sorter(field=field, order=order)


def _coerce_scalar(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _build_session(config: Dict[str, Any]) -> SessionState:
    configured = (config.get("session") or {}).get("path")
    path = Path(configured).expanduser() if configured else DEFAULT_SESSION_PATH
    return SessionState.load(path)


def _build_client(config: Dict[str, Any], session: SessionState) -> HydraHttpClient:
    api = config["api"]
    return HydraHttpClient(
        api["base_url"],
        session,
        timeout=api.get("timeout_seconds", 20),
        login_route=api.get("login_route", "/login"),
        on_unauthorized=lambda route: print(
            "Session expired. Run 'folioscope login' again.", file=sys.stderr
        ),
    )


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def cmd_query(args: argparse.Namespace) -> None:
    """Print the query string the API would receive."""
    config = load_config(args.config)
    params = {
        **map_filters(args.filter or [], get_filter_config(config)),
        **map_sorters(args.sort or []),
    }
    print(build_query_string(params))


def _format_row(record: Dict[str, Any]) -> str:
    record_id = str(record.get("id", ""))
    symbol = str(record.get("symbol") or "")
    name = str(record.get("name") or "")
    line = f"{record_id:<10} {symbol:<12} {name:<40}"
    indicators = record.get("indicators") or {}
    adx = indicators.get("adx") if isinstance(indicators, dict) else None
    if isinstance(adx, (int, float)):
        line += f" ADX {adx:>7.2f} ({adx_style(adx).value})"
    return line


def cmd_list(args: argparse.Namespace) -> None:
    """List one page of a resource."""
    config = load_config(args.config)
    session = _build_session(config)
    provider = HydraDataProvider(_build_client(config, session), get_filter_config(config))

    result = provider.get_list(
        args.resource,
        filters=args.filter or [],
        sorters=args.sort or [],
        page=args.page,
        page_size=args.page_size,
    )

    if args.json:
        _print_json(result.model_dump())
        return

    if not result.data:
        print(f"No {args.resource} found.")
        return
    for record in result.data:
        print(_format_row(record))
    print("-" * 80)
    suffix = "s" if result.total > 1 else ""
    print(f"{result.total} result{suffix}")


def cmd_show(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    session = _build_session(config)
    provider = HydraDataProvider(_build_client(config, session), get_filter_config(config))
    _print_json(provider.get_one(args.resource, args.id))


def cmd_rates(args: argparse.Namespace) -> None:
    """Show EUR conversion rates."""
    config = load_config(args.config)
    session = _build_session(config)
    cache = CacheService(default_ttl=config["cache"]["default_ttl_seconds"])
    rates = CurrencyRates(_build_client(config, session), cache)
    table = rates.fetch_rates()

    if rates.error is not None:
        print(f"Warning: could not load rates ({rates.error}), using EUR only", file=sys.stderr)

    if args.currency:
        print(f"1 {args.currency} = {rates.get_rate(args.currency):.6f} EUR")
        return
    for code in sorted(table):
        print(f"{code:<6} {table[code]:.6f}")


def cmd_login(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    session = _build_session(config)
    auth = AuthProvider(
        config["api"]["base_url"],
        session,
        login_route=config["api"].get("login_route", "/login"),
        timeout=config["api"].get("timeout_seconds", 20),
    )
    password = args.password or getpass.getpass("Password: ")
    result = auth.login(args.username, password)
    if not result.success:
        message = result.error.message if result.error else "Login failed"
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)
    identity = auth.get_identity()
    print(f"Logged in as {identity.name if identity else args.username}")


def cmd_logout(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    auth = AuthProvider(config["api"]["base_url"], _build_session(config))
    auth.logout()
    print("Logged out.")


def cmd_whoami(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    auth = AuthProvider(config["api"]["base_url"], _build_session(config))
    check = auth.check()
    if not check.authenticated:
        message = check.error.message if check.error else "Not logged in."
        print(message)
        sys.exit(1)
    identity = auth.get_identity()
    roles = ", ".join(auth.get_permissions()) or "-"
    print(f"{identity.name} <{identity.email or '-'}> roles: {roles}")


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--filter",
        action="append",
        type=parse_filter_arg,
        metavar="FIELD:OP:VALUE",
        help="Filter, e.g. visScore:eq:10,50 or countryCode:in:FR,DE (repeatable)",
    )
    parser.add_argument(
        "--sort",
        action="append",
        type=parse_sort_arg,
        metavar="FIELD[:asc|desc]",
        help="Sort key (repeatable)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="folioscope",
        description="Portfolio and market-screener client for a Hydra API",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to folioscope.config.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # query command
    query_parser = subparsers.add_parser("query", help="Print the translated query string")
    _add_query_arguments(query_parser)
    query_parser.set_defaults(func=cmd_query)

    # list command
    list_parser = subparsers.add_parser("list", help="List a resource (assets, crypto, wallets, ...)")
    list_parser.add_argument("resource", help="Resource name")
    _add_query_arguments(list_parser)
    list_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    list_parser.add_argument("--page-size", type=int, default=20, help="Items per page (default: 20)")
    list_parser.add_argument("--json", action="store_true", help="Print raw JSON")
    list_parser.set_defaults(func=cmd_list)

    # show command
    show_parser = subparsers.add_parser("show", help="Show a single record")
    show_parser.add_argument("resource", help="Resource name")
    show_parser.add_argument("id", help="Record id")
    show_parser.set_defaults(func=cmd_show)

    # rates command
    rates_parser = subparsers.add_parser("rates", help="Show currency rates to EUR")
    rates_parser.add_argument("currency", nargs="?", help="Currency code (default: all)")
    rates_parser.set_defaults(func=cmd_rates)

    # auth commands
    login_parser = subparsers.add_parser("login", help="Log in and store the session token")
    login_parser.add_argument("--username", required=True, help="Username or email")
    login_parser.add_argument("--password", help="Password (prompted when omitted)")
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout", help="Forget the stored session")
    logout_parser.set_defaults(func=cmd_logout)

    whoami_parser = subparsers.add_parser("whoami", help="Show the logged-in user")
    whoami_parser.set_defaults(func=cmd_whoami)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except HydraHttpError as e:
        logger.error(f"API error ({e.status_code}): {e}")
        print(f"Error: {e}", file=sys.stderr)
        if e.errors:
            for violation in e.errors:
                if isinstance(violation, dict):
                    print(f"  {violation.get('propertyPath', '?')}: {violation.get('message', '')}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
