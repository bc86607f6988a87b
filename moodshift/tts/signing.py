"""AWS Signature Version 4 for single JSON POST requests.

Only what the speech endpoint needs: a fixed set of three signed headers
(``content-type``, ``host``, ``x-amz-date``), an empty query string, and a
JSON body. The signature embeds the request time, so it is computed per call.
"""

from __future__ import annotations

import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import urlsplit

ALGORITHM = "AWS4-HMAC-SHA256"
SIGNED_HEADERS = "content-type;host;x-amz-date"
CONTENT_TYPE = "application/json"


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def amz_date(now: datetime) -> str:
    """``YYYYMMDDTHHMMSSZ`` in UTC."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y%m%dT%H%M%SZ")


def date_stamp(now: datetime) -> str:
    return amz_date(now)[:8]


def signing_key(secret_key: str, stamp: str, region: str, service: str) -> bytes:
    k_date = _hmac(f"AWS4{secret_key}".encode("utf-8"), stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, "aws4_request")


def canonical_request(
    method: str, path: str, host: str, timestamp: str, payload_hash: str
) -> str:
    canonical_headers = (
        f"content-type:{CONTENT_TYPE}\nhost:{host}\nx-amz-date:{timestamp}\n"
    )
    return (
        f"{method}\n{path}\n\n{canonical_headers}\n{SIGNED_HEADERS}\n{payload_hash}"
    )


def string_to_sign(timestamp: str, scope: str, canonical: str) -> str:
    return f"{ALGORITHM}\n{timestamp}\n{scope}\n{_sha256_hex(canonical.encode('utf-8'))}"


def sign_request(
    method: str,
    url: str,
    body: bytes,
    now: datetime,
    region: str,
    access_key: str,
    secret_key: str,
    service: str = "polly",
) -> dict[str, str]:
    """Return the headers that authenticate one request."""
    parts = urlsplit(url)
    host = parts.netloc
    path = parts.path or "/"
    timestamp = amz_date(now)
    stamp = timestamp[:8]

    scope = f"{stamp}/{region}/{service}/aws4_request"
    canonical = canonical_request(method, path, host, timestamp, _sha256_hex(body))
    to_sign = string_to_sign(timestamp, scope, canonical)
    signature = hmac.new(
        signing_key(secret_key, stamp, region, service),
        to_sign.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    return {
        "Content-Type": CONTENT_TYPE,
        "Host": host,
        "X-Amz-Date": timestamp,
        "Authorization": (
            f"{ALGORITHM} Credential={access_key}/{scope}, "
            f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
        ),
    }
