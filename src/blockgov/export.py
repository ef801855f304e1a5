"""
BlockGov Audit Export

Tabular export of ledger entries for auditors.
"""
from __future__ import annotations

import csv
import io
from typing import Iterable, Optional, TextIO

from .models import Decision

CSV_COLUMNS = (
    "timestamp",
    "action",
    "case_id",
    "subject",
    "actor_name",
    "actor_role",
    "details",
    "fingerprint",
)


def decision_row(decision: Decision) -> dict[str, str]:
    """One export row for a ledger entry."""
    return {
        "timestamp": decision.at.isoformat(),
        "action": decision.action.value,
        "case_id": decision.case_id,
        "subject": decision.snapshot.subject,
        "actor_name": decision.actor.name,
        "actor_role": decision.actor.role,
        "details": decision.details,
        "fingerprint": decision.fingerprint,
    }


def write_decisions_csv(decisions: Iterable[Decision], out: TextIO) -> int:
    """Write entries as CSV with a header row. Returns the number of rows."""
    writer = csv.DictWriter(out, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    count = 0
    for decision in decisions:
        writer.writerow(decision_row(decision))
        count += 1
    return count


def decisions_to_csv(decisions: Iterable[Decision], out: Optional[TextIO] = None) -> str:
    """
    Render entries as CSV.

    Columns: timestamp, action, case_id, subject, actor_name, actor_role,
    details, fingerprint. Returns the CSV text (also written to ``out``
    when given).
    """
    buffer = io.StringIO()
    write_decisions_csv(decisions, buffer)
    text = buffer.getvalue()
    if out is not None:
        out.write(text)
    return text
