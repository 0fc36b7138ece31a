"""Relational catalog of ingested filings.

One row per source locator. Rows are only ever inserted; the catalog is the
authority on which content hash a locator resolved to when it was first
ingested.
"""
import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from sqlalchemy import (
    CHAR,
    Column,
    Date,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    and_,
    create_engine,
    func,
    not_,
    select,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..data_models.filing_models import AMENDMENT_SUFFIX, FilingRecord
from ..errors import DuplicateLocator, NotFound, StorageFailure


logger = logging.getLogger(__name__)

metadata = MetaData()

filings_table = Table(
    "filings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("cik", CHAR(10), nullable=False),
    Column("filed_on", Date, nullable=False),
    Column("content_sha256", CHAR(64), nullable=False),
    Column("form", String(20), nullable=False),
    Column("source_path", String(64), nullable=False),
    Index("source_path_idx", "source_path", unique=True),
    Index("hash_idx", "content_sha256"),
    Index("form_idx", "form"),
    Index("filed_on_idx", "filed_on"),
    sqlite_autoincrement=True,
)


class FilingCatalog:

    def __init__(self, database_path: Union[str, Path], echo: bool = False):
        self.database_path = Path(database_path)
        try:
            self.engine = create_engine(f"sqlite:///{self.database_path}", echo=echo)
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error opening filing catalog {self.database_path}: {str(e)}") from e

    def _row_values(self, record: FilingRecord) -> dict:
        return {
            "cik": record.entity_id,
            "filed_on": record.filed_on,
            "content_sha256": record.content_hash,
            "form": record.form_type,
            "source_path": record.source_locator,
        }

    def record_filing(self, record: FilingRecord) -> None:
        try:
            with self.engine.begin() as connection:
                connection.execute(filings_table.insert().values(**self._row_values(record)))
        except IntegrityError as e:
            raise DuplicateLocator(f"{record.source_locator} is already in the catalog") from e
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error recording {record.source_locator}: {str(e)}") from e

    def insert_if_absent(self, record: FilingRecord) -> str:
        """Insert ``record`` unless its locator is already catalogued.

        Returns the content hash on record for the locator afterwards, which is
        the existing one when another writer inserted it first.
        """
        statement = (
            sqlite_insert(filings_table)
            .values(**self._row_values(record))
            .on_conflict_do_nothing(index_elements=["source_path"])
        )
        try:
            with self.engine.begin() as connection:
                result = connection.execute(statement)
                if result.rowcount:
                    return record.content_hash
                recorded = connection.execute(
                    select(filings_table.c.content_sha256)
                    .where(filings_table.c.source_path == record.source_locator)
                ).scalar_one()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error recording {record.source_locator}: {str(e)}") from e

        logger.debug("%s was already catalogued as %s", record.source_locator, recorded)
        return recorded

    def lookup_hash(self, source_locator: str) -> str:
        try:
            with self.engine.connect() as connection:
                content_hash = connection.execute(
                    select(filings_table.c.content_sha256)
                    .where(filings_table.c.source_path == source_locator)
                ).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error looking up {source_locator}: {str(e)}") from e

        if content_hash is None:
            raise NotFound(f"{source_locator} is not in the catalog")
        return content_hash

    def latest_by_form(self, form_prefix: str, exclude_amendments: bool = False) -> Iterator[FilingRecord]:
        """Lazily yield the most recently filed matching record per entity.

        A record matches when its form starts with ``form_prefix``, so "10-K"
        also matches "10-K/A" unless ``exclude_amendments`` is set. When one
        entity has several matches on its latest date, which one is yielded is
        unspecified.
        """
        matches = filings_table.c.form.startswith(form_prefix, autoescape=True)
        if exclude_amendments:
            matches = and_(matches, not_(filings_table.c.form.endswith(AMENDMENT_SUFFIX, autoescape=True)))

        latest = (
            select(
                filings_table.c.cik,
                func.max(filings_table.c.filed_on).label("max_filed_on"),
            )
            .where(matches)
            .group_by(filings_table.c.cik)
            .subquery()
        )
        query = (
            select(filings_table)
            .join(
                latest,
                and_(
                    filings_table.c.cik == latest.c.cik,
                    filings_table.c.filed_on == latest.c.max_filed_on,
                ),
            )
            .where(matches)
            .order_by(filings_table.c.cik)
        )

        try:
            with self.engine.connect() as connection:
                previous_cik: Optional[str] = None
                for row in connection.execute(query):
                    if row.cik == previous_cik:
                        continue
                    previous_cik = row.cik
                    yield FilingRecord(
                        entity_id=row.cik,
                        filed_on=row.filed_on,
                        content_hash=row.content_sha256,
                        form_type=row.form,
                        source_locator=row.source_path,
                    )
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error querying latest {form_prefix} filings: {str(e)}") from e

    def count(self) -> int:
        try:
            with self.engine.connect() as connection:
                return connection.execute(select(func.count()).select_from(filings_table)).scalar_one()
        except SQLAlchemyError as e:
            raise StorageFailure(f"Error counting filings: {str(e)}") from e

    def close(self) -> None:
        self.engine.dispose()
