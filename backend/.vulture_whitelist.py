from backend.src.main import health_check
from backend.src.shared.config import Settings
from backend.src.sshca.api.schemas import ErrorResponse
from backend.src.sshca.domain.models import StorageEntryRecord

# Pydantic Settings
Settings.model_config
Settings.APP_ENV

# ORM columns (used by SQLAlchemy/Alembic)
StorageEntryRecord.updated_at

# Response schema fields
ErrorResponse.failures

# FastAPI
health_check
