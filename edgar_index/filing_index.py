"""Content-addressed index of EDGAR filings.

``FilingIndex`` ties together the metadata catalog, the blob store and the
extraction pipeline. A filing is identified by its archive path; its raw bytes
are stored once per SHA-256 digest no matter how many paths resolve to them.
"""
from contextlib import closing
from datetime import date
from pathlib import Path
from typing import Callable, Iterator, Optional, Union
import io
import logging

from .settings import app_settings
from .data_collection.document_processor import DocumentTextProcessor, build_content_extractor
from .data_collection.edgar_fetcher import EDGARDataFetcher
from .data_collection.form_d_parser import FormDParser
from .data_models.filing_models import FilingRecord, IngestStatus, normalize_cik, normalize_filing_date
from .data_models.form_d_models import FormDSubmission
from .data_storage.filing_catalog import FilingCatalog
from .data_storage.object_store import FileObjectStore
from .errors import HashMismatch, InvalidFiling, NotFound, StorageFailure


logger = logging.getLogger(__name__)

# handler(record, error) -> stop
FilingHandler = Callable[[Optional[FilingRecord], Optional[Exception]], bool]


class FilingIndex:

    def __init__(
        self,
        data_directory: Optional[Union[str, Path]] = None,
        catalog: Optional[FilingCatalog] = None,
        object_store: Optional[FileObjectStore] = None,
        fetcher: Optional[EDGARDataFetcher] = None,
        text_processor: Optional[DocumentTextProcessor] = None,
        form_d_parser: Optional[FormDParser] = None,
        bucket: Optional[str] = None,
    ):
        self.data_directory = Path(data_directory or app_settings.DATA_DIRECTORY)
        self.data_directory.mkdir(parents=True, exist_ok=True)

        self.catalog = catalog or FilingCatalog(self.data_directory / app_settings.CATALOG_FILENAME)
        self.object_store = object_store or FileObjectStore(self.data_directory)
        self.fetcher = fetcher or EDGARDataFetcher()
        self.text_processor = text_processor or DocumentTextProcessor(
            build_content_extractor(app_settings.CONTENT_EXTRACTOR)
        )
        self.form_d_parser = form_d_parser or FormDParser()
        self.bucket = bucket or app_settings.STORAGE_BUCKET

    def __enter__(self) -> "FilingIndex":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def bucket_for(self, entity: str, form: str, filed_on: Union[str, date]) -> str:
        return self.bucket

    def put(self, entity: str, remote_locator: str, form: str, filed_on: Union[str, date]) -> IngestStatus:
        """Ingest one filing, fetching it only if its content is not stored yet.

        Raises HashMismatch when the archive now serves different bytes for a
        locator that was ingested before; nothing is written in that case.
        Raises InvalidFiling for a bad CIK or filing date before any fetch.
        """
        try:
            entity_id = normalize_cik(entity)
            filing_date = normalize_filing_date(filed_on)
        except (ValueError, OverflowError) as e:
            raise InvalidFiling(f"Invalid filing {remote_locator}: {str(e)}") from e

        bucket = self.bucket_for(entity_id, form, filing_date)

        try:
            known_hash = self.catalog.lookup_hash(remote_locator)
        except NotFound:
            known_hash = None

        if known_hash is not None:
            if self.object_store.exists(bucket, known_hash):
                logger.debug("%s already ingested as %s", remote_locator, known_hash)
                return IngestStatus.ALREADY_PRESENT

            document = self.fetcher.fetch(remote_locator)
            if document.content_hash != known_hash:
                raise HashMismatch(remote_locator, known_hash, document.content_hash)
            self.object_store.put(bucket, known_hash, document.content)
            logger.info("Restored missing content %s for %s", known_hash, remote_locator)
            return IngestStatus.RESTORED

        document = self.fetcher.fetch(remote_locator)
        self.object_store.put(bucket, document.content_hash, document.content)

        record = FilingRecord(
            entity_id=entity_id,
            filed_on=filing_date,
            content_hash=document.content_hash,
            form_type=form,
            source_locator=remote_locator,
        )
        recorded_hash = self.catalog.insert_if_absent(record)
        if recorded_hash != document.content_hash:
            raise HashMismatch(remote_locator, recorded_hash, document.content_hash)

        logger.info("Ingested %s %s for %s as %s", form, remote_locator, record.entity_id, document.content_hash)
        return IngestStatus.INGESTED

    def latest_filings(self, form: str, exclude_amendments: bool = False) -> Iterator[FilingRecord]:
        return self.catalog.latest_by_form(form, exclude_amendments=exclude_amendments)

    def most_recent_of_type(self, form: str, handler: FilingHandler, exclude_amendments: bool = False) -> None:
        """Call ``handler`` with the latest filing of ``form`` for each entity.

        Iteration stops as soon as the handler returns a truthy value. A query
        failure is reported once as ``handler(None, error)`` and ends the
        iteration; exceptions raised by the handler itself propagate.
        """
        with closing(self.latest_filings(form, exclude_amendments=exclude_amendments)) as records:
            while True:
                try:
                    record = next(records)
                except StopIteration:
                    return
                except StorageFailure as e:
                    logger.error("Query for latest %s filings failed: %s", form, e)
                    handler(None, e)
                    return
                if handler(record, None):
                    return

    def get_source(self, content_hash: str) -> bytes:
        return self.object_store.get(self.bucket, content_hash)

    def get_plain_text(self, content_hash: str) -> io.StringIO:
        raw = self.get_source(content_hash)
        return io.StringIO(self.text_processor.extract_text(raw))

    def parse_form_d(self, content_hash: str) -> FormDSubmission:
        raw = self.get_source(content_hash)
        return self.form_d_parser.parse(raw)

    def close(self) -> None:
        self.catalog.close()
