import os
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
from dotenv import load_dotenv

load_dotenv()

# -----------------------------
# DEFAULTS
# -----------------------------

DEFAULT_TIMEOUT = 30
DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(levelname)s  %(message)s"

REQUIRED_VARIABLES = (
    "BITBUCKET_SECRET",
    "BITBUCKET_SERVER_URL",
    "BITBUCKET_TOKEN",
    "S3BUCKET",
)


@dataclass(frozen=True)
class RelayConfig:
    signing_secret: str
    server_url: str
    token: str
    bucket: str
    proxy_host: Optional[str] = None
    proxy_port: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelayConfig":
        """
        Build the relay configuration from environment variables.
        Raises RuntimeError naming the first required variable that is missing.
        """
        env = os.environ if environ is None else environ

        for name in REQUIRED_VARIABLES:
            if not env.get(name):
                raise RuntimeError(f"{name} is not set")

        raw_timeout = env.get("REQUEST_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise RuntimeError(f"REQUEST_TIMEOUT is not a number: {raw_timeout!r}")

        return cls(
            signing_secret=env["BITBUCKET_SECRET"],
            server_url=env["BITBUCKET_SERVER_URL"].rstrip("/"),
            token=env["BITBUCKET_TOKEN"],
            bucket=env["S3BUCKET"],
            proxy_host=env.get("WEBPROXY_HOST") or None,
            proxy_port=env.get("WEBPROXY_PORT") or None,
            timeout=timeout,
            log_level=env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL,
        )

    def proxies(self) -> Optional[Dict[str, str]]:
        # proxy only applies when both host and port are configured
        if not (self.proxy_host and self.proxy_port):
            return None

        proxy_url = f"http://{self.proxy_host}:{self.proxy_port}"
        return {"http": proxy_url, "https": proxy_url}


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)
