from __future__ import annotations

import pytest
import requests

from roster_attendance.services import (
    CheckInContext,
    QRCodeClient,
    QRCodeServiceError,
    build_check_in_url,
    parse_check_in_url,
    qr_image_url,
)


class FakeResponse:
    def __init__(self, *, status_code=200, content=b"\x89PNG", content_type="image/png"):
        self.status_code = status_code
        self.content = content
        self.headers = {"Content-Type": content_type}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def test_check_in_url_round_trip():
    url = build_check_in_url("https://attendance.example.com/", "3반", "월요일", "오전")

    assert url.startswith("https://attendance.example.com?mode=member&classId=")
    assert parse_check_in_url(url) == CheckInContext(roster_id="3반", day="월요일", slot="오전")


def test_parse_check_in_url_requires_all_parameters():
    assert parse_check_in_url("https://attendance.example.com?mode=member&classId=3반") is None


def test_qr_image_url_encodes_data():
    url = qr_image_url("https://a.example?x=1&y=2", size=120)

    assert url.startswith("https://api.qrserver.com/v1/create-qr-code/?size=120x120&data=")
    assert "x%3D1%26y%3D2" in url


def test_fetch_png_returns_image_bytes():
    session = FakeSession()
    client = QRCodeClient(service_url="https://qr.example/", timeout=3, session=session)

    assert client.fetch_png("hello", size=100) == b"\x89PNG"
    url, params, timeout = session.calls[0]
    assert url == "https://qr.example/"
    assert params["size"] == "100x100"
    assert params["data"] == "hello"
    assert timeout == 3

    client.close()
    assert session.closed


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("offline")),
        FakeSession(response=FakeResponse(status_code=503)),
        FakeSession(response=FakeResponse(content_type="text/html")),
    ],
)
def test_fetch_png_failures(session):
    client = QRCodeClient(session=session)

    with pytest.raises(QRCodeServiceError):
        client.fetch_png("hello")
