"""Shared fixtures for the vietqr test suite."""

import os

import pytest

os.environ.setdefault("VIETQR_LOGGING__JSON_LOGS", "false")

from vietqr.models import ServiceCode, VietQRConfig  # noqa: E402

DYNAMIC_ACCOUNT_PAYLOAD = (
    "00020101021238570010A00000072701270006970403011300110123456780208QRIBFTTA"
    "530370454061800005802VN62340107NPS68690819thanh toan don hang63042E2E"
)
STATIC_CARD_PAYLOAD = (
    "00020101021138600010A00000072701300006970403011697040311012345670208QRIBFTTC"
    "53037045802VN63044F52"
)
API_KEY = "dev-secret-key"


@pytest.fixture
def dynamic_config():
    return VietQRConfig(
        bank_code="970403",
        service_code=ServiceCode.ACCOUNT_TRANSFER,
        account_number="0011012345678",
        amount="180000",
        bill_number="NPS6869",
        purpose="thanh toan don hang",
    )


@pytest.fixture
def static_card_config():
    return VietQRConfig(
        bank_code="970403",
        service_code=ServiceCode.CARD_TRANSFER,
        card_number="9704031101234567",
    )


@pytest.fixture
def dynamic_payload():
    return DYNAMIC_ACCOUNT_PAYLOAD


@pytest.fixture
def static_payload():
    return STATIC_CARD_PAYLOAD


@pytest.fixture
def test_client():
    from fastapi.testclient import TestClient

    from vietqr.api import app

    with TestClient(app) as client:
        client.headers.update({"x-api-key": API_KEY})
        yield client


class FakeReader:
    """QR reader stand-in that returns canned texts and records what it saw."""

    def __init__(self, texts=(), error=None):
        self.texts = list(texts)
        self.error = error
        self.calls = 0

    def read(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.texts


@pytest.fixture
def fake_reader_factory():
    return FakeReader
