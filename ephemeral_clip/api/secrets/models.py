from typing import Optional
from pydantic import BaseModel, Field


class CreateSecretRequest(BaseModel):
    # Presence is checked by SecretService so a missing field is a plain 400
    ciphertext: Optional[str] = None
    iv: Optional[str] = None
    ttl: Optional[int] = None


class CreateSecretResponse(BaseModel):
    id: str = Field(pattern=r"^[0-9a-f]{32}$")
    ttl: int
    message: str = "Secret stored successfully"


class SecretEnvelopeResponse(BaseModel):
    ciphertext: str
    iv: str


class DeleteSecretResponse(BaseModel):
    message: str = "Secret deleted successfully"
