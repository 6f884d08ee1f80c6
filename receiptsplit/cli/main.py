#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence
from decimal import Decimal

from receiptsplit.domain.allocation import TaxPolicy
from receiptsplit.domain.money import to_decimal
from receiptsplit.runtime import enable_debug_logging, load_settings, set_data_root

_EDIT_COMMANDS = {
    "assign": "assign",
    "unassign": "unassign",
    "toggle": "toggle",
    "weights": "weights",
    "mode": "mode",
    "split-evenly": "split_evenly",
    "paid": "paid",
    "unpaid": "unpaid",
    "delete-item": "delete_item",
    "delete": "delete_split",
}


def _non_negative_decimal(value: str) -> Decimal:
    """argparse type for rates and weights."""
    amount = to_decimal(value)
    if not amount.is_finite() or amount < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative number, got {value!r}")
    return amount


def _add_item_member_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("split_id", help="Split id (or unique prefix)")
    parser.add_argument("item_id", help="Item id (or unique prefix)")
    parser.add_argument("member", help="Member name or id")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Receipt splitting CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  import <items.json> [--member NAME ...]  Create a split from raw receipt items
  list                                     List recent splits
  show <split>                             Show items and what each member owes
  assign|unassign|toggle <split> <item> <member>
  weights <split> <item> <member> [--ratio R] [--quantity N]
  mode <split> <item> {equal,ratio,quantity}
  split-evenly <split>                     Everyone shares every item equally
  paid|unpaid <split> <member>             Record payment status
  delete-item <split> <item>
  delete <split>
  members add <name> | members list
  serve [--host] [--port]                  Start the JSON API server
""",
    )
    parser.add_argument("--home", default=None, help="Data directory (default: $RECEIPTSPLIT_HOME or ~/.receiptsplit)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    import_parser = subparsers.add_parser("import", help="Create a split from raw receipt items")
    import_parser.add_argument("items_file", help="JSON file: {\"items\": [...]} or a list of items")
    import_parser.add_argument("--member", "-m", action="append", help="Member name (repeatable)")
    import_parser.add_argument("--name", default=None, help="Split name (default: derived from members)")
    import_parser.add_argument("--payer", default=None, help="Member who paid the receipt")
    import_parser.add_argument(
        "--tax-rate", type=_non_negative_decimal, default=None, help="Tax estimate multiplier, e.g. 0.13"
    )

    list_parser = subparsers.add_parser("list", help="List recent splits")
    list_parser.add_argument("--limit", type=int, default=10, help="How many splits to show (default: 10)")

    show_parser = subparsers.add_parser("show", help="Show per-member totals")
    show_parser.add_argument("split_id", help="Split id (or unique prefix)")
    show_parser.add_argument("--policy", choices=[p.value for p in TaxPolicy], default=None)
    show_parser.add_argument(
        "--tax-rate", type=_non_negative_decimal, default=None, help="Percentage for the flat policy, e.g. 13"
    )

    for command in ("assign", "unassign", "toggle"):
        _add_item_member_args(subparsers.add_parser(command, help=f"{command.capitalize()} a member on an item"))

    assign_parser = subparsers.choices["assign"]
    assign_parser.add_argument("--ratio", type=_non_negative_decimal, default=None, help="Weight for ratio mode")
    assign_parser.add_argument("--quantity", type=int, default=None, help="Units claimed for quantity mode")

    weights_parser = subparsers.add_parser("weights", help="Set a member's ratio/quantity on an item")
    _add_item_member_args(weights_parser)
    weights_parser.add_argument("--ratio", type=_non_negative_decimal, default=None)
    weights_parser.add_argument("--quantity", type=int, default=None)

    mode_parser = subparsers.add_parser("mode", help="Change an item's split mode")
    mode_parser.add_argument("split_id")
    mode_parser.add_argument("item_id")
    mode_parser.add_argument("mode", choices=["equal", "ratio", "quantity"])

    evenly_parser = subparsers.add_parser("split-evenly", help="Assign every member to every item")
    evenly_parser.add_argument("split_id")

    for command in ("paid", "unpaid"):
        paid_parser = subparsers.add_parser(command, help=f"Mark a member as {command}")
        paid_parser.add_argument("split_id")
        paid_parser.add_argument("member")

    delete_item_parser = subparsers.add_parser("delete-item", help="Remove an item from a split")
    delete_item_parser.add_argument("split_id")
    delete_item_parser.add_argument("item_id")

    delete_parser = subparsers.add_parser("delete", help="Delete a split")
    delete_parser.add_argument("split_id")

    members_parser = subparsers.add_parser("members", help="Manage members")
    members_subparsers = members_parser.add_subparsers(dest="members_command")
    members_add = members_subparsers.add_parser("add", help="Register a member")
    members_add.add_argument("name")
    members_add.add_argument("--frequent", action="store_true", help="Mark as a frequent member")
    members_list = members_subparsers.add_parser("list", help="List members")
    members_list.add_argument("--frequent", action="store_true", help="Only frequent members")

    serve_parser = subparsers.add_parser("serve", help="Start the JSON API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.verbose:
        enable_debug_logging()

    if args.home:
        set_data_root(args.home)
        load_settings.cache_clear()

    from receiptsplit.cli import split as commands

    handlers: dict[str, Callable[[argparse.Namespace], int]] = {
        "import": commands.cmd_import,
        "list": commands.cmd_list,
        "show": commands.cmd_show,
        "members": commands.cmd_members,
        "serve": commands.cmd_serve,
    }

    if args.command in _EDIT_COMMANDS:
        args.action = _EDIT_COMMANDS[args.command]
        return commands.cmd_edit(args)

    if args.command == "members" and args.members_command is None:
        args.members_command = "list"
        args.frequent = False

    handler = handlers.get(args.command)
    if handler is None:
        return 1
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
