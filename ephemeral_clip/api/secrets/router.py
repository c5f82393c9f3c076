from fastapi import APIRouter, Depends

from ephemeral_clip.api.secrets.models import (
    CreateSecretRequest,
    CreateSecretResponse,
    DeleteSecretResponse,
    SecretEnvelopeResponse,
)
from ephemeral_clip.dependencies import get_secret_service
from ephemeral_clip.domain.secrets.service import SecretService

router = APIRouter()


@router.post("/create", response_model=CreateSecretResponse)
async def create_secret(
    payload: CreateSecretRequest,
    service: SecretService = Depends(get_secret_service),
):
    """Store an encrypted envelope. The key never reaches this endpoint."""
    secret_id, ttl = await service.create(payload.ciphertext, payload.iv, payload.ttl)
    return CreateSecretResponse(id=secret_id, ttl=ttl)


@router.get("/secret/{secret_id}", response_model=SecretEnvelopeResponse)
async def get_secret(secret_id: str, service: SecretService = Depends(get_secret_service)):
    envelope = await service.fetch(secret_id)
    return SecretEnvelopeResponse(ciphertext=envelope.ciphertext, iv=envelope.iv)


@router.delete("/secret/{secret_id}", response_model=DeleteSecretResponse)
async def delete_secret(secret_id: str, service: SecretService = Depends(get_secret_service)):
    """Idempotent: deleting an unknown but well-formed id still succeeds."""
    await service.delete(secret_id)
    return DeleteSecretResponse()
