import logging
import requests
from dataclasses import dataclass
from typing import Dict, Optional

from relay_errors import ArchiveFetchError

logger = logging.getLogger(__name__)

TIMEOUT = 30


@dataclass(frozen=True)
class RepositoryReference:
    server_url: str
    project_key: str
    repo_name: str
    branch: str
    token: str

    @property
    def object_key(self) -> str:
        return f"{self.project_key}/{self.repo_name}/{self.branch}.zip"

    @property
    def archive_url(self) -> str:
        return archive_url(self.server_url, self.project_key, self.repo_name, self.branch)


def archive_url(server_url: str, project: str, repo: str, branch: str) -> str:
    return (
        f"{server_url.rstrip('/')}/rest/api/latest/projects/{project}"
        f"/repos/{repo}/archive?at=refs/heads/{branch}&format=zip"
    )


def fetch_archive(
    reference: RepositoryReference,
    proxies: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
    timeout: float = TIMEOUT,
) -> requests.Response:
    """
    Request the zip archive of one branch as a stream.

    The caller owns the returned response and must close it once the
    body has been consumed.
    """
    logger.info(">>> fetch_archive()")
    logger.info("proxy: %s", proxies)

    http = session or requests.Session()
    headers = {"Authorization": f"Bearer {reference.token}"}

    r = None
    try:
        r = http.get(
            reference.archive_url,
            headers=headers,
            proxies=proxies,
            stream=True,
            timeout=timeout,
        )
        r.raise_for_status()
    except requests.RequestException as e:
        if r is not None:
            r.close()
        logger.error("Archive download failed for %s: %s", reference.object_key, e)
        raise ArchiveFetchError(str(e)) from e

    logger.info("<<< fetch_archive()")
    return r
