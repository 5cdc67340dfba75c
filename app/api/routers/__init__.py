"""
app/api/routers package marker.
"""

from app.api.routers.csv_upload import router as csv_upload_router
from app.api.routers.manual_input import router as manual_input_router
from app.api.routers.metric_catalog import router as metric_catalog_router

__all__ = [
    "csv_upload_router",
    "manual_input_router",
    "metric_catalog_router",
]
