"""Reader for EDGAR's pipe-delimited master index listings."""
from typing import Iterable, Iterator

from ..data_models.filing_models import AMENDMENT_SUFFIX, MasterIndexEntry


HEADER_TERMINATOR = "-----"
FIELD_COUNT = 5


def iter_master_index(lines: Iterable[str], form_type: str, include_amended: bool = False) -> Iterator[MasterIndexEntry]:
    wanted_forms = {form_type}
    if include_amended:
        wanted_forms.add(form_type + AMENDMENT_SUFFIX)

    in_body = False
    for line_number, line in enumerate(lines, 1):
        line = line.rstrip("\r\n")
        if not in_body:
            in_body = line.startswith(HEADER_TERMINATOR)
            continue
        if not line.strip():
            continue

        fields = line.split("|")
        if len(fields) != FIELD_COUNT:
            raise ValueError(f"line {line_number}: expected {FIELD_COUNT} fields, got {len(fields)}")
        if fields[2] not in wanted_forms:
            continue

        yield MasterIndexEntry(
            cik=fields[0],
            company_name=fields[1],
            form_type=fields[2],
            date_filed=fields[3],
            file_name=fields[4],
        )
