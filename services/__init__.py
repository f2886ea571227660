"""
services - Business-logic layer sitting between API and DB.
"""

from services.records_service import RecordsService                # noqa: F401
from services.matching_service import suggest_asset                # noqa: F401
from services.sync_service import (                                # noqa: F401
    SyncOutcome, MatchCandidate, is_duplicate, preview, sync_mapped,
)
