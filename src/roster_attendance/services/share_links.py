from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

import requests

from roster_attendance.services.errors import QRCodeServiceError

logger = logging.getLogger(__name__)

DEFAULT_QR_SERVICE_URL = "https://api.qrserver.com/v1/create-qr-code/"
DEFAULT_QR_SIZE = 250


@dataclass(frozen=True)
class CheckInContext:
    """Self-service entry point resolved from a shared link."""

    roster_id: str
    day: str
    slot: str


def build_check_in_url(base_url: str, roster_id: str, day: str, slot: str) -> str:
    base = base_url.strip()
    if base.endswith("/"):
        base = base[:-1]
    query = urlencode({"mode": "member", "classId": roster_id, "day": day, "slot": slot})
    return f"{base}?{query}"


def parse_check_in_url(url: str) -> Optional[CheckInContext]:
    params = parse_qs(urlsplit(url).query)

    def first(name: str) -> str:
        values = params.get(name) or [""]
        return values[0].strip()

    roster_id, day, slot = first("classId"), first("day"), first("slot")
    if not (roster_id and day and slot):
        return None
    return CheckInContext(roster_id=roster_id, day=day, slot=slot)


def qr_image_url(data: str, *, size: int = DEFAULT_QR_SIZE, service_url: str = DEFAULT_QR_SERVICE_URL) -> str:
    return f"{service_url}?{urlencode({'size': f'{size}x{size}', 'data': data})}"


class QRCodeClient:
    """Fetches rendered QR images for check-in links."""

    def __init__(
        self,
        *,
        service_url: str = DEFAULT_QR_SERVICE_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._service_url = service_url
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch_png(self, data: str, *, size: int = DEFAULT_QR_SIZE) -> bytes:
        params = {"size": f"{size}x{size}", "data": data, "format": "png"}
        try:
            response = self._session.get(self._service_url, params=params, timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise QRCodeServiceError(f"QR service request failed: {exc}") from exc

        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("image/"):
            raise QRCodeServiceError(f"QR service returned {content_type or 'no content type'} instead of an image.")

        logger.info("Fetched %d byte QR image from %s", len(response.content), self._service_url)
        return response.content

    def close(self) -> None:
        self._session.close()
