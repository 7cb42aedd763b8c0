"""
Bitbucket Server push webhook relay.

Verifies the webhook signature, downloads the zip archive of the pushed
branch and stores it in S3 under <project>/<repo>/<branch>.zip.
"""

import base64
import hmac
import hashlib
import logging
import requests
from typing import Any, Dict, Mapping, NamedTuple, Optional

from archive_fetcher import RepositoryReference, fetch_archive
from archive_store import ArchiveStore
from gateway_response import build_response
from notification_models import parse_notification
from relay_config import RelayConfig, configure_logging
from relay_errors import InvalidEventTypeError

logger = logging.getLogger(__name__)

PING_EVENT_KEY = "diagnostics:ping"
BRANCH_REF_TYPE = "BRANCH"

PING_MESSAGE = "Webhook configured successfully"
SUCCESS_MESSAGE = "success"
INVALID_SIGNATURE_FAULT = "Signature is not valid"
GENERIC_FAULT = "Some weird thing happened"

# -----------------------------
# HEADERS + SIGNATURE
# -----------------------------


class SignatureHeader(NamedTuple):
    algorithm: str
    digest: str


def normalize_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {key.lower(): value for key, value in (headers or {}).items()}


def parse_signature_header(value: Optional[str]) -> Optional[SignatureHeader]:
    if not value or "=" not in value:
        return None

    algorithm, digest = value.split("=", 1)
    return SignatureHeader(algorithm.strip(), digest.strip())


def check_signature(secret: str, signature: Optional[str], body: bytes) -> bool:
    parsed = parse_signature_header(signature)
    if parsed is None:
        return False

    expected = hmac.new(
        secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(expected.encode("ascii"), parsed.digest.encode("utf-8"))


def raw_body(event: Mapping[str, Any]) -> bytes:
    body = event.get("body") or ""

    if event.get("isBase64Encoded"):
        return base64.b64decode(body)

    if isinstance(body, bytes):
        return body
    return body.encode("utf-8")


# -----------------------------
# RELAY
# -----------------------------


class WebhookRelay:

    def __init__(
        self,
        config: RelayConfig,
        store: Optional[ArchiveStore] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.store = store or ArchiveStore(config.bucket)
        self.session = session

    def handle(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            return self._relay(event)
        except Exception:
            logger.exception("Exiting with error")
            return build_response(500, GENERIC_FAULT)

    def _relay(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        headers = normalize_headers(event.get("headers"))
        body = raw_body(event)
        logger.info(
            "Incoming event: headers=%s body_bytes=%d",
            sorted(headers),
            len(body),
        )

        if headers.get("x-event-key") == PING_EVENT_KEY:
            return build_response(200, PING_MESSAGE)

        if not check_signature(
            self.config.signing_secret, headers.get("x-hub-signature"), body
        ):
            logger.warning("Invalid webhook message signature")
            return build_response(401, INVALID_SIGNATURE_FAULT)
        logger.info("Signature validated successfully")

        notification = parse_notification(body)

        ref_type = notification.first_change.ref.type
        if ref_type != BRANCH_REF_TYPE:
            logger.warning("Invalid event type: %s", ref_type)
            raise InvalidEventTypeError(ref_type)

        reference = RepositoryReference(
            server_url=self.config.server_url,
            project_key=notification.project_key,
            repo_name=notification.repo_name,
            branch=notification.branch,
            token=self.config.token,
        )

        self.store_archive(reference)

        logger.info("Exiting successfully")
        return build_response(200, SUCCESS_MESSAGE)

    def store_archive(self, reference: RepositoryReference) -> str:
        archive = fetch_archive(
            reference,
            proxies=self.config.proxies(),
            session=self.session,
            timeout=self.config.timeout,
        )

        with archive:
            archive.raw.decode_content = True
            return self.store.upload(reference.object_key, archive.raw)


# -----------------------------
# LAMBDA ENTRY POINT
# -----------------------------

_relay: Optional[WebhookRelay] = None


def get_relay() -> WebhookRelay:
    global _relay

    if _relay is None:
        config = RelayConfig.from_env()
        configure_logging(config.log_level)
        _relay = WebhookRelay(config)

    return _relay


def lambda_handler(event, context):
    try:
        relay = get_relay()
    except RuntimeError:
        logger.exception("Relay configuration is incomplete")
        return build_response(500, GENERIC_FAULT)

    return relay.handle(event)
