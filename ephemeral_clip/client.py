"""HTTP client for an Ephemeral Clip server, including the full share/reveal flow.

Encryption happens here, on the caller's machine. Only ciphertext and iv are
sent to the server; the key is returned to the caller inside the share URL.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from ephemeral_clip.crypto.cipher import MAX_PLAINTEXT_CHARS, SecretCipher
from ephemeral_clip.domain.interfaces import SecretEnvelope
from ephemeral_clip.domain.links import build_share_url, parse_share_url
from ephemeral_clip.errors import BackendUnavailable, ClipError, NotFoundError, ValidationError
from ephemeral_clip.utils.id import is_valid_secret_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedSecret:
    id: str
    ttl: int


class ClipClient:
    def __init__(
        self,
        base_url: str,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        cipher: Optional[SecretCipher] = None,
        max_plaintext_chars: int = MAX_PLAINTEXT_CHARS,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = http or httpx.Client(base_url=self.base_url, timeout=timeout)
        self._owns_http = http is None
        self.cipher = cipher or SecretCipher(max_plaintext_chars=max_plaintext_chars)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ClipClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # --- raw API ---

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise BackendUnavailable("Request to the secret server timed out") from e
        except httpx.TransportError as e:
            raise BackendUnavailable(f"Could not reach the secret server: {e}") from e

        if resp.is_success:
            try:
                data = resp.json()
            except ValueError as e:
                raise BackendUnavailable("Unexpected response from server") from e
            if not isinstance(data, dict):
                raise BackendUnavailable("Unexpected response from server")
            return data

        message = _error_message(resp)
        if resp.status_code == 404:
            raise NotFoundError()
        if resp.status_code >= 500:
            raise BackendUnavailable(message)
        if resp.status_code >= 400:
            raise ValidationError(message)
        raise ClipError(message)

    def create_secret(self, ciphertext: str, iv: str, ttl: Optional[int] = None) -> CreatedSecret:
        body: Dict[str, Any] = {"ciphertext": ciphertext, "iv": iv}
        if ttl is not None:
            body["ttl"] = ttl
        data = self._request("POST", "/api/create", json=body)
        try:
            return CreatedSecret(id=data["id"], ttl=int(data["ttl"]))
        except (KeyError, TypeError, ValueError) as e:
            raise BackendUnavailable("Unexpected response from server") from e

    def fetch_secret(self, secret_id: str) -> SecretEnvelope:
        data = self._request("GET", f"/api/secret/{secret_id}")
        try:
            return SecretEnvelope(ciphertext=data["ciphertext"], iv=data["iv"])
        except (KeyError, PydanticValidationError) as e:
            raise BackendUnavailable("Unexpected response from server") from e

    def delete_secret(self, secret_id: str) -> None:
        self._request("DELETE", f"/api/secret/{secret_id}")

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    # --- end-to-end flow ---

    def share(self, plaintext: str, ttl: Optional[int] = None) -> str:
        """Encrypt locally, upload the envelope and return the share URL."""
        secret = plaintext.strip()
        if not secret:
            raise ValidationError("Please enter a secret to share.")

        if len(secret) > self.cipher.max_plaintext_chars:
            raise ValidationError(f"Secret must be less than {self.cipher.max_plaintext_chars:,} characters.")

        key = self.cipher.generate_key()
        encrypted = self.cipher.encrypt(secret, key)
        created = self.create_secret(encrypted.ciphertext, encrypted.iv, ttl)
        logger.info(f"Shared secret {created.id} (ttl={created.ttl}s)")
        return build_share_url(self.base_url, created.id, self.cipher.export_key(key))

    def reveal(self, url: str, delete_after: bool = False) -> str:
        """Fetch and decrypt the secret behind a share URL."""
        link = parse_share_url(url)
        key = self.cipher.import_key(link.key)
        envelope = self.fetch_secret(link.secret_id)
        plaintext = self.cipher.decrypt(envelope.ciphertext, envelope.iv, key)
        if delete_after:
            self.delete_secret(link.secret_id)
        return plaintext


def resolve_secret_id(value: str) -> str:
    """Accept either a bare identifier or a full share URL."""
    if is_valid_secret_id(value):
        return value
    return parse_share_url(value).secret_id


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"Server returned HTTP {resp.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message") or f"Server returned HTTP {resp.status_code}"
    if isinstance(error, str):
        return error
    return f"Server returned HTTP {resp.status_code}"
