import hashlib

import pytest

from edgar_index.errors import RemoteFetchFailure

from conftest import ARCHIVE_URL


def test_fetch_buffers_content_and_hashes_it(archive_session, fetcher):
    body = b"<SEC-DOCUMENT>\n" + b"x" * 100 + b"\n</SEC-DOCUMENT>\n"
    archive_session.serve("edgar/data/1/0001.txt", body)

    document = fetcher.fetch("edgar/data/1/0001.txt")

    assert document.content == body
    assert document.content_hash == hashlib.sha256(body).hexdigest()
    assert archive_session.requests == [ARCHIVE_URL + "edgar/data/1/0001.txt"]


def test_repeated_fetches_hash_identically(archive_session, fetcher):
    archive_session.serve("edgar/data/1/0001.txt", b"same bytes")

    first = fetcher.fetch("edgar/data/1/0001.txt")
    second = fetcher.fetch("edgar/data/1/0001.txt")

    assert first.content_hash == second.content_hash


def test_non_success_status_is_a_fetch_failure(archive_session, fetcher):
    archive_session.serve("edgar/data/1/gone.txt", 503)

    with pytest.raises(RemoteFetchFailure, match="503"):
        fetcher.fetch("edgar/data/1/gone.txt")


def test_transport_error_is_a_fetch_failure(archive_session, fetcher, connection_error):
    archive_session.serve("edgar/data/1/reset.txt", connection_error)

    with pytest.raises(RemoteFetchFailure, match="connection reset"):
        fetcher.fetch("edgar/data/1/reset.txt")
