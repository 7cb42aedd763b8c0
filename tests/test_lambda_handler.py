import pytest

import relay_handler
from conftest import make_event
from gateway_response import response_body

ENV = {
    "BITBUCKET_SECRET": "secret",
    "BITBUCKET_SERVER_URL": "https://bitbucket.example.com",
    "BITBUCKET_TOKEN": "token",
    "S3BUCKET": "bucket",
}


@pytest.fixture(autouse=True)
def fresh_relay(monkeypatch):
    monkeypatch.setattr(relay_handler, "_relay", None)


def test_lambda_handler_builds_relay_from_environment(monkeypatch):
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)

    response = relay_handler.lambda_handler(make_event("", event_key="diagnostics:ping"), None)

    assert response["statusCode"] == 200
    assert relay_handler._relay.config.bucket == "bucket"
    assert relay_handler.get_relay() is relay_handler._relay


def test_lambda_handler_rejects_unsigned_event(monkeypatch):
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)

    response = relay_handler.lambda_handler(make_event("{}"), None)

    assert response["statusCode"] == 401


def test_lambda_handler_without_configuration_returns_500(monkeypatch):
    for key in ENV:
        monkeypatch.delenv(key, raising=False)

    response = relay_handler.lambda_handler(make_event("{}"), None)

    assert response["statusCode"] == 500
    assert response_body(response)["fault"] == "Some weird thing happened"
