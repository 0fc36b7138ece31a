from typing import Optional
import hashlib
import io
import logging
import time

import requests

from ..settings import app_settings
from ..data_models.filing_models import FetchedDocument
from ..errors import RemoteFetchFailure


logger = logging.getLogger(__name__)


class EDGARDataFetcher:

    def __init__(
        self,
        archive_base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
        request_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        chunk_size: Optional[int] = None,
    ):
        self.archive_base_url = archive_base_url or app_settings.ARCHIVE_BASE_URL
        self.session = session or requests.Session()
        self.request_headers = {
            'User-Agent': user_agent or app_settings.USER_AGENT
        }

        self.request_interval = app_settings.REQUEST_INTERVAL if request_interval is None else request_interval
        self.timeout = app_settings.REQUEST_TIMEOUT if timeout is None else timeout
        self.chunk_size = chunk_size or app_settings.DOWNLOAD_CHUNK_SIZE
        self.previous_request_time = 0

    def _enforce_rate_limiting(self):
        current_timestamp = time.time()
        time_elapsed = current_timestamp - self.previous_request_time
        if time_elapsed < self.request_interval:
            time.sleep(self.request_interval - time_elapsed)
        self.previous_request_time = time.time()

    def document_url(self, remote_locator: str) -> str:
        return self.archive_base_url + remote_locator

    def fetch(self, remote_locator: str) -> FetchedDocument:
        """Download a filing once, hashing the body while it is buffered."""
        url = self.document_url(remote_locator)
        self._enforce_rate_limiting()
        logger.info("Fetching %s", url)

        digest = hashlib.sha256()
        buffer = io.BytesIO()
        try:
            with self.session.get(url, headers=self.request_headers, stream=True, timeout=self.timeout) as response:
                if not 200 <= response.status_code < 300:
                    raise RemoteFetchFailure(
                        f"unexpected response code while fetching {url}: {response.status_code} {response.reason}"
                    )
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    digest.update(chunk)
                    buffer.write(chunk)
        except requests.exceptions.RequestException as e:
            raise RemoteFetchFailure(f"Error fetching {url}: {str(e)}") from e

        return FetchedDocument(content=buffer.getvalue(), content_hash=digest.hexdigest())
