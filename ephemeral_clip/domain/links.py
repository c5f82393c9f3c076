"""Share link format: <base>/view?id=<hex32>#<base64-key>.

User agents never send the fragment to the server, which is what keeps the
key off the wire between client and store.
"""
from dataclasses import dataclass, field
from urllib.parse import parse_qs, unquote, urlsplit

from ephemeral_clip.errors import ValidationError
from ephemeral_clip.utils.id import is_valid_secret_id

VIEW_PATH = "/view"


@dataclass(frozen=True)
class ShareLink:
    secret_id: str
    key: str = field(repr=False)
    base_url: str = ""


def build_share_url(base_url: str, secret_id: str, key_b64: str) -> str:
    return f"{base_url.rstrip('/')}{VIEW_PATH}?id={secret_id}#{key_b64}"


def parse_share_url(url: str) -> ShareLink:
    parts = urlsplit(url.strip())

    ids = parse_qs(parts.query).get("id")
    if not ids or not ids[0]:
        raise ValidationError("No secret ID found in the URL. Please check the link and try again.")
    secret_id = ids[0]
    if not is_valid_secret_id(secret_id):
        raise ValidationError("Invalid secret ID")

    key = unquote(parts.fragment)
    if not key:
        raise ValidationError("No encryption key found in the URL fragment. The link may be incomplete.")

    path = parts.path
    if path.endswith(VIEW_PATH):
        path = path[: -len(VIEW_PATH)]
    base_url = f"{parts.scheme}://{parts.netloc}{path}" if parts.netloc else ""
    return ShareLink(secret_id=secret_id, key=key, base_url=base_url)
