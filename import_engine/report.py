"""
import_engine.report - Structured result of a PAT file import run.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ImportReport:
    batch_id: int = 0
    total_lines: int = 0
    imported: int = 0
    rejected: int = 0
    dates_inferred: int = 0
    errors: list[dict] = field(default_factory=list)   # [{line, reason}]

    def add_rejection(self, line: int, reason: str):
        self.errors.append({"line": line, "reason": reason})
        self.rejected += 1

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "total_lines": self.total_lines,
            "imported": self.imported,
            "rejected": self.rejected,
            "dates_inferred": self.dates_inferred,
            "errors": self.errors,
        }
