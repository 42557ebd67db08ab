"""Boundary between reviewed JSON payloads and the import domain."""

from __future__ import annotations

from .translator import (
    commit_result_to_payload,
    entry_to_payload,
    rating_to_payload,
    report_to_payload,
    to_book_row,
    to_commit_request,
)

__all__ = [
    "commit_result_to_payload",
    "entry_to_payload",
    "rating_to_payload",
    "report_to_payload",
    "to_book_row",
    "to_commit_request",
]
