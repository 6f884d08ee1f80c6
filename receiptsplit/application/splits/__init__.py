"""Split workflows."""

from receiptsplit.application.splits.editing import EditSplitRequest, EditSplitResult, run_edit_split
from receiptsplit.application.splits.importing import ImportReceiptRequest, ImportReceiptResult, run_import_receipt
from receiptsplit.application.splits.listing import run_add_member, run_list_members, run_list_splits
from receiptsplit.application.splits.summary import SplitSummaryRequest, SplitSummaryResult, run_split_summary

__all__ = [
    "ImportReceiptRequest",
    "ImportReceiptResult",
    "run_import_receipt",
    "SplitSummaryRequest",
    "SplitSummaryResult",
    "run_split_summary",
    "EditSplitRequest",
    "EditSplitResult",
    "run_edit_split",
    "run_list_splits",
    "run_list_members",
    "run_add_member",
]
