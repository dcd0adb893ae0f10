"""HTTP surface tests using the FastAPI test client."""

import base64

from vietqr.images import PNG_MAGIC


class TestSystemEndpoints:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_metrics(self, test_client):
        response = test_client.get("/metrics")
        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

    def test_request_id_is_echoed(self, test_client):
        response = test_client.get("/health", headers={"x-request-id": "abc123"})
        assert response.headers["x-request-id"] == "abc123"


class TestAuth:
    def test_missing_api_key(self, test_client, static_payload):
        response = test_client.post("/v1/qr/parse", json={"payload": static_payload}, headers={"x-api-key": "wrong"})
        assert response.status_code == 401


class TestGenerateEndpoint:
    def test_generate_dynamic(self, test_client, dynamic_payload):
        response = test_client.post(
            "/v1/qr",
            json={
                "bank_code": "970403",
                "service_code": "QRIBFTTA",
                "account_number": "0011012345678",
                "amount": "180000",
                "bill_number": "NPS6869",
                "purpose": "thanh toan don hang",
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["payload"] == dynamic_payload
        assert body["crc"] == "2E2E"
        assert body["variant"] == "dynamic"
        assert body["fields"][2]["children"][1]["children"][0]["value"] == "970403"
        assert body["qr_png_base64"] is None

    def test_generate_with_image(self, test_client):
        response = test_client.post(
            "/v1/qr",
            json={
                "bank_code": "970403",
                "service_code": "QRIBFTTC",
                "card_number": "9704031101234567",
                "include_image": True,
                "image": {"size": 120},
            },
        )
        assert response.status_code == 200
        assert base64.b64decode(response.json()["qr_png_base64"]).startswith(PNG_MAGIC)

    def test_invalid_config_returns_all_errors(self, test_client):
        response = test_client.post(
            "/v1/qr",
            json={"bank_code": "97", "account_number": "ACC-1", "amount": "-1"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "ERR_INVALID_CONFIG"
        assert {"bank_code", "account_number", "amount"} <= {error["field"] for error in body["errors"]}
        assert all(error["actual_value"] in (None, "[REDACTED]") for error in body["errors"] if error["field"] == "bank_code")


class TestParseEndpoint:
    def test_parse(self, test_client, static_payload):
        response = test_client.post("/v1/qr/parse", json={"payload": static_payload})
        assert response.status_code == 200
        record = response.json()["record"]
        assert record["initiation_method"] == "static"
        assert record["service_code"] == "QRIBFTTC"

    def test_parse_failure(self, test_client, static_payload):
        response = test_client.post("/v1/qr/parse", json={"payload": static_payload[:-3]})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "ERR_UNEXPECTED_END"
        assert body["position"] is not None


class TestValidateEndpoint:
    def test_valid_payload(self, test_client, dynamic_payload):
        response = test_client.post("/v1/qr/validate", json={"payload": dynamic_payload})
        assert response.status_code == 200
        validation = response.json()["validation"]
        assert validation["valid"] is True
        assert validation["corrupted"] is False

    def test_tampered_payload(self, test_client, dynamic_payload):
        tampered = dynamic_payload.replace("180000", "980000")
        response = test_client.post("/v1/qr/validate", json={"payload": tampered})
        validation = response.json()["validation"]
        assert validation["valid"] is False
        assert validation["corrupted"] is True
        assert validation["recoverable"] is True
        assert validation["errors"][0]["code"] == "CHECKSUM_MISMATCH"


class TestImageEndpoint:
    def test_png(self, test_client, static_payload):
        response = test_client.post("/v1/qr/image", json={"payload": static_payload, "options": {"size": 100}})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(PNG_MAGIC)

    def test_svg(self, test_client, static_payload):
        response = test_client.post("/v1/qr/image", json={"payload": static_payload, "options": {"format": "svg"}})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("image/svg+xml")

    def test_rejects_broken_payload(self, test_client):
        response = test_client.post("/v1/qr/image", json={"payload": "0002"})
        assert response.status_code == 400
