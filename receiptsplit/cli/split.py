"""Split command handlers used by the unified CLI."""

import argparse
from pathlib import Path

from receiptsplit.application.splits import (
    EditSplitRequest,
    ImportReceiptRequest,
    SplitSummaryRequest,
    run_add_member,
    run_edit_split,
    run_import_receipt,
    run_list_members,
    run_list_splits,
    run_split_summary,
)
from receiptsplit.domain.allocation import TaxPolicy
from receiptsplit.domain.item import SplitMode
from receiptsplit.domain.money import format_currency, round_money
from receiptsplit.runtime import get_logger, load_settings

logger = get_logger(__name__)


def cmd_import(args: argparse.Namespace) -> int:
    """Import raw receipt items from JSON into a new split."""
    result = run_import_receipt(
        ImportReceiptRequest(
            items_path=Path(args.items_file),
            member_names=list(args.member or []),
            name=args.name,
            payer_name=args.payer,
            tax_rate=args.tax_rate,
        )
    )
    if result.status != "imported":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        return 1

    split = result.split
    summary = result.summary
    assert split is not None and summary is not None
    currency = load_settings().currency

    print(f"Created split {split.id}: {split.name}")
    print(f"Items: {len(split.items)}")
    print(f"Subtotal:  {format_currency(summary.subtotal, currency)}")
    print(f"Discounts: {format_currency(summary.total_discount, currency)}")
    print(f"Deposits:  {format_currency(summary.total_deposit, currency)}")
    print(f"Est. tax:  {format_currency(summary.total_tax, currency)}")
    print(f"Total:     {format_currency(summary.grand_total, currency)}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List recent splits."""
    listing = run_list_splits(limit=args.limit)
    currency = load_settings().currency
    if not listing.splits:
        print("No splits saved yet.")
        return 0

    for split in listing.splits:
        created = split.created_at.strftime("%Y-%m-%d")
        print(
            f"{split.id[:8]}  {created}  {split.status:<9}  {len(split.items):>3} items  "
            f"{format_currency(split.total, currency):>10}  {split.name}"
        )
    monthly = listing.monthly
    print(
        f"\nThis month: {monthly.count} splits, {monthly.items} items, "
        f"{format_currency(monthly.total, currency)}"
    )
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Show items and per-member totals for one split."""
    result = run_split_summary(
        SplitSummaryRequest(
            split_id=args.split_id,
            tax_policy=TaxPolicy(args.policy) if args.policy else None,
            tax_rate=args.tax_rate,
        )
    )
    if result.status != "ok":
        print(f"Error: {result.error}")
        return 1

    split = result.split
    summary = result.summary
    assert split is not None and summary is not None
    names = result.member_names
    currency = result.currency

    print("=" * 60)
    print(f"{split.name}  [{split.id[:8]}]")
    print("=" * 60)
    for item in split.items:
        mode = item.split_mode.value if isinstance(item.split_mode, SplitMode) else item.split_mode
        qty_str = f" x{item.quantity}" if item.quantity and item.quantity > 1 else ""
        tax_str = " T" if item.has_tax else ""
        assignees = ", ".join(names.get(m, m) for m in item.member_ids) or "-"
        print(f"  {item.id[:8]}  {item.name}{qty_str} - {format_currency(item.effective_price, currency)}{tax_str}")
        print(f"            {mode}: {assignees}")

    policy_str = result.tax_policy.value if result.tax_policy else ""
    if result.tax_rate is not None:
        policy_str += f" {round_money(result.tax_rate)}%"
    print(f"\nTax policy: {policy_str}")
    for total in summary.member_totals:
        paid_str = " (paid)" if total.is_paid else ""
        print(
            f"  {names.get(total.member_id, total.member_id):<16} "
            f"{format_currency(total.subtotal, currency):>10} + {format_currency(total.tax, currency):>8} tax"
            f" = {format_currency(total.total, currency):>10}{paid_str}"
        )

    print(
        f"\nAssigned {summary.assigned_count}/{summary.item_count} items "
        f"({round_money(summary.progress_percentage)}%), "
        f"unassigned {format_currency(summary.unassigned_amount, currency)}"
    )
    for item in result.overclaimed_items:
        print(f"Warning: '{item.name}' has more units claimed than its quantity ({item.quantity}).")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    """Apply one assignment edit (assign, unassign, toggle, weights, mode, ...)."""
    result = run_edit_split(
        EditSplitRequest(
            split_id=args.split_id,
            action=args.action,
            item_id=getattr(args, "item_id", None),
            member=getattr(args, "member", None),
            ratio=getattr(args, "ratio", None),
            quantity=getattr(args, "quantity", None),
            mode=SplitMode(args.mode) if getattr(args, "mode", None) else None,
        )
    )
    if result.status in ("split_not_found", "item_not_found", "member_not_found"):
        print(f"Error: {result.error}")
        return 1
    if result.status == "unchanged":
        print(result.error or "Nothing to change.")
        return 0
    if result.status == "deleted":
        print(f"Deleted split {args.split_id}.")
        return 0
    print("Updated.")
    return 0


def cmd_members(args: argparse.Namespace) -> int:
    """Add or list members."""
    if args.members_command == "add":
        member = run_add_member(args.name, is_frequent=args.frequent)
        print(f"{member.id[:8]}  {member.name}")
        return 0

    listing = run_list_members(frequent_only=args.frequent)
    if not listing.members:
        print("No members yet.")
        return 0
    for member in listing.members:
        star = " *" if member.is_frequent else ""
        print(f"{member.id[:8]}  {member.name}{star}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI server for split calculations."""
    import uvicorn

    from receiptsplit.runtime import split_server as server

    print(f"Starting split server on {args.host}:{args.port}")
    print(f"Endpoints: http://{args.host}:{args.port}/convert | /totals | /health")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)
    return 0
