"""SSH CA configuration API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import JSONResponse
from shared.config import settings
from shared.database import get_db
from sqlalchemy.ext.asyncio import AsyncSession

from sshca.api.auth import require_operator
from sshca.api.schemas import (
    CAPublicKeyResponse,
    ConfigureCARequest,
    ErrorResponse,
    StageFailureResponse,
)
from sshca.ca.generator import KeyGenerationError
from sshca.repository.storage import DatabaseStorage, Storage, StorageError
from sshca.services.ca_config_service import (
    CAConfigError,
    CAConfigService,
    ConflictError,
    InvalidRequestError,
    RollbackError,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/ssh",
    tags=["ssh-ca"],
    dependencies=[Depends(require_operator)],
)


def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    """Dependency to get the scoped storage backend."""
    return DatabaseStorage(db, settings.STORAGE_SCOPE)


def get_ca_config_service(storage: Storage = Depends(get_storage)) -> CAConfigService:
    """Dependency to get CAConfigService instance."""
    return CAConfigService(storage)


def _error(status_code: int, code: str, error: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, code=code, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/config/ca",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def configure_ca(
    body: ConfigureCARequest,
    service: CAConfigService = Depends(get_ca_config_service),
) -> Response:
    """
    Set the SSH private key used for signing certificates.

    The fields must be in the standard private and public SSH format. For
    security reasons, the private key cannot be retrieved later.

    - Auth: operator API key
    - Returns: 204 No Content
    - Errors: 400 BAD_REQUEST (invalid fields or keys), 409 CONFLICT (already
      configured), 500 INTERNAL_SERVER_ERROR (storage or generation failure)
    """
    try:
        await service.configure(
            public_key=body.public_key,
            private_key=body.private_key,
            generate_signing_key=body.generate_flag,
        )
    except InvalidRequestError as e:
        return _error(status.HTTP_400_BAD_REQUEST, "INVALID_REQUEST", str(e))
    except ConflictError as e:
        return _error(status.HTTP_409_CONFLICT, "ALREADY_CONFIGURED", str(e))
    except RollbackError as e:
        logger.error(
            "ca_config_partial_state",
            extra={"stages": [f.stage.value for f in e.failures]},
        )
        content = ErrorResponse(
            error="CA public key left without private key; manual cleanup required",
            code="ROLLBACK_FAILED",
            detail=str(e),
            failures=[
                StageFailureResponse(stage=f.stage.value, error=str(f.error)) for f in e.failures
            ],
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content.model_dump(exclude_none=True),
        )
    except (CAConfigError, KeyGenerationError, StorageError) as e:
        logger.error("ca_config_failed", extra={"error": str(e)})
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/config/ca", response_model=CAPublicKeyResponse)
async def read_ca(
    service: CAConfigService = Depends(get_ca_config_service),
) -> CAPublicKeyResponse:
    """
    Get the configured CA public key.

    - Auth: operator API key
    - Errors: 404 NOT_FOUND (not configured), 500 INTERNAL_SERVER_ERROR
    """
    try:
        public_key = await service.get_public_key()
    except (StorageError, UnicodeDecodeError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None

    if not public_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="keys haven't been configured yet",
        )
    return CAPublicKeyResponse(public_key=public_key)


@router.delete("/config/ca", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ca(
    service: CAConfigService = Depends(get_ca_config_service),
) -> None:
    """
    Delete the CA key pair.

    Idempotent: deleting an unconfigured CA succeeds.

    - Auth: operator API key
    - Errors: 500 INTERNAL_SERVER_ERROR (storage failure)
    """
    try:
        await service.delete()
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from None
