from datetime import date, datetime
from enum import Enum
from typing import Union
from dateutil.parser import parse
from pydantic import BaseModel, field_validator


AMENDMENT_SUFFIX = "/A"


def normalize_cik(cik: Union[str, int]) -> str:
    cik = str(cik).strip()
    if not cik.isdigit() or len(cik) > 10:
        raise ValueError(f"CIK must be at most 10 digits: {cik!r}")
    return cik.zfill(10)


def normalize_filing_date(value: Union[str, date, datetime]) -> date:
    # master indexes have used both 2020-01-31 and 20200131
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse(str(value).strip()).date()


class FilingRecord(BaseModel):

    entity_id: str
    filed_on: date
    content_hash: str
    form_type: str
    source_locator: str

    class Config:
        frozen = True

    @field_validator("entity_id", mode="before")
    @classmethod
    def _pad_entity_id(cls, value):
        return normalize_cik(value)

    @field_validator("filed_on", mode="before")
    @classmethod
    def _parse_filed_on(cls, value):
        return normalize_filing_date(value)

    @property
    def is_amendment(self) -> bool:
        return self.form_type.upper().endswith(AMENDMENT_SUFFIX)


class FetchedDocument(BaseModel):

    content: bytes
    content_hash: str


class IngestStatus(str, Enum):

    INGESTED = "ingested"
    RESTORED = "restored"
    ALREADY_PRESENT = "already_present"


class MasterIndexEntry(BaseModel):

    cik: str
    company_name: str
    form_type: str
    date_filed: str
    file_name: str
