"""OKX request signing."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from typing import Dict, Optional


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp in the format OKX expects, e.g. 2024-05-01T12:00:00.123Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sign_request(secret_key: str, timestamp: str, method: str, path: str, body: str = "") -> str:
    """Base64 HMAC-SHA256 of timestamp + method + path + body."""
    prehash = f"{timestamp}{method}{path}{body}"
    digest = hmac.new(secret_key.encode(), prehash.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def build_auth_headers(
    api_key: str,
    secret_key: str,
    passphrase: str,
    method: str,
    path: str,
    body: str = "",
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """Build the OKX private-endpoint headers.

    The timestamp is captured here, right before the request goes out, and the
    same value is both signed and sent. OKX rejects requests whose timestamp
    drifts more than a few seconds from server time.

    Args:
        path: Request path including the query string, e.g.
            /api/v5/tradingBot/grid/orders-algo-pending?algoOrdType=contract_grid
    """
    timestamp = timestamp or iso_timestamp()
    return {
        "OK-ACCESS-KEY": api_key,
        "OK-ACCESS-SIGN": sign_request(secret_key, timestamp, method, path, body),
        "OK-ACCESS-TIMESTAMP": timestamp,
        "OK-ACCESS-PASSPHRASE": passphrase,
        "Content-Type": "application/json",
    }
