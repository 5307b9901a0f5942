"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from results_api.models.bulk_upload import BulkUpload
from results_api.models.results import CenterResult, ConstituencyResult
from results_api.models.user import User

__all__ = [
    "BulkUpload",
    "CenterResult",
    "ConstituencyResult",
    "User",
]
