"""
Paymentnepal request signing and callback checksums.

Two schemes coexist and must not be unified:
- HMAC-SHA256 over METHOD/HOST/PATH/QUERY for API requests (`sign`)
- plain MD5 digests for the pay types listing (`legacy_check`) and for
  inbound callbacks (`callback_check`)
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import locale
from decimal import Decimal
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlsplit


# Field order the gateway uses when computing a callback `check`
CALLBACK_SIGN_ORDER = (
    "tid",
    "name",
    "comment",
    "partner_id",
    "service_id",
    "order_id",
    "type",
    "cost",
    "income_total",
    "income",
    "partner_income",
    "system_income",
    "command",
    "phone_number",
    "email",
    "resultStr",
    "date_created",
    "version",
)


def to_param(value: Any) -> str:
    """Stringify a request value the way the gateway expects it."""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def normalize_params(params: Mapping[str, Any]) -> dict[str, str]:
    return {str(k): to_param(v) for k, v in params.items()}


def canonicalize(params: Mapping[str, Any]) -> str:
    """Join params as k=v pairs in the given order.

    Values are percent-encoded per RFC 3986 (space becomes %20); keys are
    emitted as-is.
    """
    return "&".join(f"{k}={quote(to_param(v), safe='')}" for k, v in params.items())


def _split_url(url: str) -> tuple[str, Optional[int], Optional[str]]:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return "", None, None
    return parts.hostname or "", port, parts.path or None


def sign(
    method: str,
    url: str,
    params: Mapping[str, Any],
    secret: str,
    skip_port: bool = False,
) -> str:
    """Base64 HMAC-SHA256 signature of a request.

    The signed string is ``METHOD\\nHOST\\nPATH\\nQUERY`` where QUERY is the
    canonical form of `params` sorted by key. A `check` entry is never part
    of its own input.
    """
    ordered = {k: params[k] for k in sorted(params, key=locale.strxfrm) if k != "check"}

    host, port, path = _split_url(url.lower())
    path = path.rstrip("/\\") + "/" if path is not None else ""
    if port is not None and port != 80 and not skip_port:
        host = f"{host}:{port}"

    data = "\n".join([method.upper(), host, path, canonicalize(ordered)])
    digest = hmac.new(secret.encode("utf-8"), data.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def legacy_check(service_id: Any, secret: str) -> str:
    """MD5 checksum accepted by the pay types endpoint."""
    return hashlib.md5(f"{service_id}{secret}".encode("utf-8")).hexdigest()


def callback_check(payload: Mapping[str, Any], secret: str) -> str:
    # Absent fields are skipped, not replaced with empty strings
    values = [to_param(payload[field]) for field in CALLBACK_SIGN_ORDER
              if payload.get(field) is not None]
    values.append(secret)
    return hashlib.md5("".join(values).encode("utf-8")).hexdigest()


def verify_callback(payload: Mapping[str, Any], secret: str) -> bool:
    check = payload.get("check")
    if not check:
        return False
    expected = callback_check(payload, secret)
    return hmac.compare_digest(expected.encode("utf-8"), str(check).encode("utf-8"))
