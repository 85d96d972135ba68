"""Execution layer: paper ledger, live router stub and CSV audit trail."""

from __future__ import annotations

from updown.execution.audit import AuditLogger
from updown.execution.live_router import LiveOrderRouter
from updown.execution.paper_ledger import PaperLedger

__all__ = [
    "AuditLogger",
    "LiveOrderRouter",
    "PaperLedger",
]
