"""Workflow and CLI tests against a temporary data root."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

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
from receiptsplit.cli.main import main
from receiptsplit.domain.allocation import TaxPolicy
from receiptsplit.domain.item import SplitMode
from receiptsplit.domain.split import Split
from receiptsplit.runtime.split_storage import load_member_registry, load_split_book


def _write_items(tmp_path: Path) -> Path:
    path = tmp_path / "items.json"
    payload = {
        "items": [
            {"name": "Pizza", "price": 24.00, "hasTax": True},
            {"name": "Salad", "price": 9.00},
            {"name": "Pop", "price": 6.00, "quantity": 3, "hasTax": True, "deposit": 0.30},
        ],
        "totalTax": 3.90,
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _import(tmp_path: Path) -> Split:
    result = run_import_receipt(
        ImportReceiptRequest(items_path=_write_items(tmp_path), member_names=["Alice", "Bob"], payer_name="Alice")
    )
    assert result.status == "imported"
    assert result.split is not None
    return result.split


def _edit(split_id: str, action: str, **kwargs) -> str:
    return run_edit_split(EditSplitRequest(split_id=split_id, action=action, **kwargs)).status


def test_import_creates_named_draft_split(tmp_path: Path) -> None:
    split = _import(tmp_path)

    assert split.name == "Alice & Bob's Split"
    assert split.status == "draft"
    assert split.region == "on"
    assert split.total_tax_from_receipt == Decimal("3.9")
    assert all(not item.assignments for item in split.items)

    registry = load_member_registry()
    assert [m.name for m in registry.members] == ["Alice", "Bob"]
    assert split.payer == registry.find_by_name("alice").id

    stored = load_split_book().find(split.id)
    assert stored is not None
    assert [item.name for item in stored.items] == ["Pizza", "Salad", "Pop"]


def test_import_reports_missing_and_invalid_files(tmp_path: Path) -> None:
    missing = run_import_receipt(ImportReceiptRequest(items_path=tmp_path / "nope.json"))
    assert missing.status == "file_not_found"

    bad = tmp_path / "bad.json"
    bad.write_text('{"items": [{"name": "X", "price": -1}]}', encoding="utf-8")
    invalid = run_import_receipt(ImportReceiptRequest(items_path=bad))
    assert invalid.status == "invalid_items"
    assert len(load_split_book()) == 0


def test_edit_then_summarize(tmp_path: Path) -> None:
    split = _import(tmp_path)
    pizza, salad, pop = (item.id for item in split.items)

    assert _edit(split.id, "assign", item_id=pizza, member="Alice") == "updated"
    assert _edit(split.id, "assign", item_id=pizza, member="Bob") == "updated"
    assert _edit(split.id, "assign", item_id=pizza, member="Bob") == "unchanged"
    assert _edit(split.id, "toggle", item_id=salad[:12], member="Bob") == "updated"
    assert _edit(split.id, "assign", item_id=pop, member="Alice") == "updated"
    assert _edit(split.id, "assign", item_id=pop, member="Bob") == "updated"
    assert _edit(split.id, "mode", item_id=pop, mode=SplitMode.QUANTITY) == "updated"
    assert _edit(split.id, "mode", item_id=pop, mode=SplitMode.QUANTITY) == "unchanged"
    assert _edit(split.id, "weights", item_id=pop, member="Bob", quantity=2) == "updated"
    assert _edit(split.id, "paid", member="Bob") == "updated"

    result = run_split_summary(SplitSummaryRequest(split_id=split.id[:10]))
    assert result.status == "ok"
    assert result.tax_policy == TaxPolicy.ITEM
    summary = result.summary
    assert summary is not None
    assert summary.progress_percentage == 100

    alice, bob = summary.member_totals
    assert result.member_names[alice.member_id] == "Alice"
    # pizza 12 + pop (6.30 / 3 claimed units)
    assert alice.subtotal == Decimal("12") + Decimal("6.30") / 3
    assert bob.subtotal == Decimal("12") + Decimal("9") + Decimal("6.30") * 2 / 3
    assert bob.is_paid
    assert not alice.is_paid


def test_summary_flat_policy_uses_region_rate(tmp_path: Path) -> None:
    split = _import(tmp_path)
    assert _edit(split.id, "split_evenly") == "updated"

    result = run_split_summary(SplitSummaryRequest(split_id=split.id, tax_policy=TaxPolicy.FLAT))
    assert result.tax_rate == Decimal("13")
    alice, bob = result.summary.member_totals
    assert alice.subtotal == Decimal("19.65")
    assert alice.tax == Decimal("19.65") * Decimal("13") / 100


def test_summary_flags_overclaimed_items(tmp_path: Path) -> None:
    split = _import(tmp_path)
    salad = split.items[1].id
    assert _edit(split.id, "assign", item_id=salad, member="Alice") == "updated"
    assert _edit(split.id, "mode", item_id=salad, mode=SplitMode.QUANTITY) == "updated"
    assert _edit(split.id, "weights", item_id=salad, member="Alice", quantity=2) == "updated"

    result = run_split_summary(SplitSummaryRequest(split_id=split.id))
    assert [item.name for item in result.overclaimed_items] == ["Salad"]


def test_edit_errors(tmp_path: Path) -> None:
    split = _import(tmp_path)
    item_id = split.items[0].id
    assert _edit("missing", "assign", item_id=item_id, member="Alice") == "split_not_found"
    assert _edit(split.id, "assign", item_id="zzz", member="Alice") == "item_not_found"
    assert _edit(split.id, "assign", item_id=item_id, member="Mallory") == "member_not_found"
    assert _edit(split.id, "unassign", item_id=item_id, member="Alice") == "unchanged"


def test_delete_item_and_split(tmp_path: Path) -> None:
    split = _import(tmp_path)
    assert _edit(split.id, "delete_item", item_id=split.items[0].id) == "updated"
    assert len(load_split_book().find(split.id).items) == 2

    assert _edit(split.id, "delete_split") == "deleted"
    assert load_split_book().find(split.id) is None


def test_listing_and_members(tmp_path: Path) -> None:
    _import(tmp_path)
    listing = run_list_splits()
    assert len(listing.splits) == 1
    assert listing.monthly.count == 1

    carol = run_add_member("Carol", is_frequent=True)
    assert run_add_member("carol").id == carol.id
    assert [m.name for m in run_list_members(frequent_only=True).members] == ["Carol"]
    assert len(run_list_members().members) == 3


def test_cli_import_show_and_edit(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    home = tmp_path / "cli-home"
    items = _write_items(tmp_path)

    assert main(["--home", str(home), "import", str(items), "-m", "Alice", "-m", "Bob"]) == 0
    out = capsys.readouterr().out
    assert "Alice & Bob's Split" in out
    assert "Subtotal:  $51.00" in out

    split = load_split_book(home / "data" / "splits.json").splits[0]
    assert main(["--home", str(home), "split-evenly", split.id[:8]]) == 0
    assert main(["--home", str(home), "paid", split.id[:8], "Bob"]) == 0
    capsys.readouterr()

    assert main(["--home", str(home), "show", split.id[:8]]) == 0
    out = capsys.readouterr().out
    assert "Tax policy: item" in out
    assert "Assigned 3/3 items (100.00%)" in out
    assert "(paid)" in out

    assert main(["--home", str(home), "list"]) == 0
    assert "This month: 1 splits" in capsys.readouterr().out


def test_cli_reports_unknown_split(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["show", "nope"]) == 1
    assert "Split not found" in capsys.readouterr().out


def test_cli_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


@pytest.mark.parametrize(
    "extra",
    [
        ["import", "items.json", "--tax-rate", "abc"],
        ["import", "items.json", "--tax-rate", "-0.13"],
        ["show", "abc", "--tax-rate", "nan"],
        ["weights", "abc", "def", "Alice", "--ratio", "x"],
    ],
)
def test_cli_rejects_bad_numbers_with_usage_error(extra: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(extra)
    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "invalid" in err or "non-negative" in err
