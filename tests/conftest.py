"""Shared fixtures: an in-memory stand-in for the SEC archive."""

from typing import Dict, List, Union

import pytest
import requests

from edgar_index.data_collection.edgar_fetcher import EDGARDataFetcher
from edgar_index.filing_index import FilingIndex

ARCHIVE_URL = "https://archive.test/Archives/"


class FakeResponse:

    def __init__(self, status_code: int, body: bytes, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeArchiveSession:
    """Serves documents keyed by full URL and records every request."""

    def __init__(self):
        self.documents: Dict[str, Union[bytes, int, Exception]] = {}
        self.requests: List[str] = []

    def serve(self, locator: str, content: Union[bytes, int, Exception]) -> None:
        self.documents[ARCHIVE_URL + locator] = content

    def get(self, url, headers=None, stream=False, timeout=None):
        self.requests.append(url)
        content = self.documents.get(url, 404)
        if isinstance(content, Exception):
            raise content
        if isinstance(content, int):
            return FakeResponse(content, b"", reason="Not Found")
        return FakeResponse(200, content, reason="OK")


@pytest.fixture()
def archive_session() -> FakeArchiveSession:
    return FakeArchiveSession()


@pytest.fixture()
def fetcher(archive_session) -> EDGARDataFetcher:
    return EDGARDataFetcher(
        archive_base_url=ARCHIVE_URL,
        session=archive_session,
        request_interval=0,
        chunk_size=7,
    )


@pytest.fixture()
def filing_index(tmp_path, fetcher):
    index = FilingIndex(data_directory=tmp_path / "data", fetcher=fetcher, bucket="edgar")
    yield index
    index.close()


@pytest.fixture()
def connection_error() -> Exception:
    return requests.exceptions.ConnectionError("connection reset")
