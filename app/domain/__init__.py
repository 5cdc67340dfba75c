"""
app/domain package marker.
"""

from app.domain.metric_upload import ParsedCSV, RowFailure, UploadResult

__all__ = [
    "ParsedCSV",
    "RowFailure",
    "UploadResult",
]
