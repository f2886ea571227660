"""
import_engine - PAT tester export import pipeline.

Public API:
    import_records(file_content)   → list[PATRecord]   (nothing persisted)
    parse_records(file_content)    → (list[PATRecord], ImportReport)
    run_import(file_content)       → ImportReport      (records committed)
"""

from import_engine.importer import (                  # noqa: F401
    import_records, parse_records, run_import, new_batch_id,
)
from import_engine.report import ImportReport         # noqa: F401
from import_engine.errors import (                    # noqa: F401
    ImportEngineError, UnreadableFileError, RowError,
)
