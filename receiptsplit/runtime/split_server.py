"""FastAPI server exposing the converter and allocation engine as JSON."""

from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from receiptsplit.domain.allocation import AllocationSummary, MemberTotal, TaxPolicy, allocation_summary
from receiptsplit.domain.item import Item
from receiptsplit.domain.money import ZERO, non_negative_amount, round_money
from receiptsplit.receipt.converter import convert_raw_items, parse_raw_items, summarize_raw_items
from receiptsplit.runtime import get_logger, load_settings
from receiptsplit.runtime.split_storage import item_from_dict, item_to_dict

logger = get_logger(__name__)

app = FastAPI(title="Receipt Splitter")


def _money(value: Decimal) -> str:
    return str(round_money(value))


def _member_total_to_dict(total: MemberTotal) -> dict[str, Any]:
    return {
        "memberId": total.member_id,
        "subtotal": _money(total.subtotal),
        "tax": _money(total.tax),
        "total": _money(total.total),
        "isPaid": total.is_paid,
        "items": [
            {
                "id": line.item.id,
                "name": line.item.name,
                "share": _money(line.share),
                "tax": _money(line.tax),
            }
            for line in total.items
        ],
    }


def summary_to_dict(summary: AllocationSummary) -> dict[str, Any]:
    return {
        "memberTotals": [_member_total_to_dict(total) for total in summary.member_totals],
        "itemCount": summary.item_count,
        "assignedCount": summary.assigned_count,
        "unassignedAmount": _money(summary.unassigned_amount),
        "progressPercentage": _money(summary.progress_percentage),
        "allocatedTotal": _money(summary.allocated_total),
    }


def _totals_item_from_dict(record: Any) -> Item:
    """Decode one /totals item, rejecting what the engine cannot price."""
    if not isinstance(record, dict):
        raise ValueError(f"Each item must be a JSON object, got {record!r}")
    non_negative_amount(record.get("price"), "price", optional=False)
    for field_name in ("quantity", "discount", "deposit", "taxAmount"):
        non_negative_amount(record.get(field_name), field_name)
    assignments = record.get("assignments") or []
    if not isinstance(assignments, list) or not all(isinstance(a, dict) for a in assignments):
        raise ValueError(f"assignments must be a list of objects in item {record.get('id')!r}")
    for assignment in assignments:
        non_negative_amount(assignment.get("ratio"), "ratio")
        non_negative_amount(assignment.get("quantity"), "quantity")
    return item_from_dict(record)


@app.post("/convert")
async def convert(request: Request) -> JSONResponse:
    """Convert raw OCR items into canonical items plus an estimated receipt summary."""
    try:
        body = await request.json()
        raw_items = parse_raw_items(body)
        tax_value = body.get("taxRate") if isinstance(body, dict) else None
        if tax_value is not None:
            tax_rate = non_negative_amount(tax_value, "taxRate")
        else:
            tax_rate = load_settings().default_tax_rate
    except (ValueError, TypeError) as e:
        logger.warning("Rejected /convert request: %s", e)
        return JSONResponse({"status": "error", "message": str(e)}, status_code=400)

    items = convert_raw_items(raw_items, default_tax_rate=tax_rate)
    summary = summarize_raw_items(raw_items, default_tax_rate=tax_rate)
    return JSONResponse(
        {
            "status": "success",
            "items": [item_to_dict(item) for item in items],
            "summary": {
                "subtotal": _money(summary.subtotal),
                "totalTax": _money(summary.total_tax),
                "totalDiscount": _money(summary.total_discount),
                "totalDeposit": _money(summary.total_deposit),
                "grandTotal": _money(summary.grand_total),
            },
        }
    )


@app.post("/totals")
async def totals(request: Request) -> JSONResponse:
    """Compute per-member totals for the posted items and members."""
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")
        records = body.get("items", [])
        if not isinstance(records, list):
            raise ValueError("items must be a list")
        items = [_totals_item_from_dict(record) for record in records]
        member_ids = [str(member_id) for member_id in body.get("members", [])]
        tax_policy = TaxPolicy(str(body.get("taxPolicy", TaxPolicy.ITEM.value)).lower())
        tax_rate = non_negative_amount(body.get("taxRate"), "taxRate") or ZERO
        paid_members = set(body.get("paidMembers", []))
    except (KeyError, ValueError, TypeError) as e:
        logger.warning("Rejected /totals request: %s", e)
        return JSONResponse({"status": "error", "message": str(e)}, status_code=400)

    summary = allocation_summary(
        items,
        member_ids,
        tax_rate=tax_rate,
        tax_policy=tax_policy,
        paid_members=paid_members,
    )
    return JSONResponse({"status": "success", **summary_to_dict(summary)})


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
