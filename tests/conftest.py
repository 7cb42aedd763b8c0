import hmac
import hashlib
import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from archive_store import ArchiveStore
from relay_config import RelayConfig
from relay_handler import WebhookRelay

SECRET = "webhook_secret@8989"
SERVER_URL = "https://bitbucket.example.com"
TOKEN = "bitbucket-token"
BUCKET = "repo-archives"


def sign(body: str, secret: str = SECRET) -> str:
    digest = hmac.new(secret.encode("utf-8"), msg=body.encode("utf-8"), digestmod=hashlib.sha256)
    return f"sha256={digest.hexdigest()}"


def push_body(
    project: str = "PROJ",
    repo: str = "myrepo",
    branch: str = "main",
    ref_type: str = "BRANCH",
) -> str:
    return json.dumps({
        "eventKey": "repo:refs_changed",
        "actor": {"name": "admin"},
        "repository": {
            "slug": repo,
            "name": repo,
            "project": {"key": project, "name": "Project"},
        },
        "changes": [
            {
                "ref": {
                    "id": f"refs/heads/{branch}",
                    "displayId": branch,
                    "type": ref_type,
                },
                "fromHash": "0" * 40,
                "toHash": "a" * 40,
                "type": "UPDATE",
            }
        ],
    })


def make_event(
    body: str,
    signature: Optional[str] = None,
    event_key: str = "repo:refs_changed",
    extra_headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    headers = {
        "Content-Type": "application/json; charset=utf-8",
        "X-Event-Key": event_key,
    }
    if signature is not None:
        headers["X-Hub-Signature"] = signature
    headers.update(extra_headers or {})
    return {"headers": headers, "body": body}


@pytest.fixture
def config() -> RelayConfig:
    return RelayConfig(
        signing_secret=SECRET,
        server_url=SERVER_URL,
        token=TOKEN,
        bucket=BUCKET,
    )


@pytest.fixture
def archive_response() -> MagicMock:
    response = MagicMock(name="archive_response")
    response.status_code = 200
    return response


@pytest.fixture
def session(archive_response) -> MagicMock:
    http = MagicMock(name="session")
    http.get.return_value = archive_response
    return http


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock(name="s3_client")


@pytest.fixture
def relay(config, session, s3_client) -> WebhookRelay:
    return WebhookRelay(config, store=ArchiveStore(BUCKET, s3_client), session=session)
