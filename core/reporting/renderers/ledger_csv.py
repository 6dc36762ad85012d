import csv
from pathlib import Path
from typing import List

from core.reporting.contexts import SessionLedgerRow

LEDGER_HEADERS = ["Date", "Client", "Task", "Tags", "Hours", "Billable", "Revenue", "Allocation", "Project"]


class SessionLedgerCsvRenderer:
    def render(self, rows: List[SessionLedgerRow], output_path: Path) -> Path:
        with output_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(LEDGER_HEADERS)
            for r in rows:
                writer.writerow(
                    [
                        r.date.isoformat(),
                        r.client,
                        r.task,
                        r.tags,
                        f"{r.duration:.2f}",
                        "Yes" if r.billable else "No",
                        f"{r.revenue:.2f}",
                        r.allocation,
                        r.project,
                    ]
                )
        return output_path
