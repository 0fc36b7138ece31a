from typing import TextIO
import csv
import json

from ..data_models.filing_models import FilingRecord
from ..data_models.form_d_models import FORM_D_CSV_COLUMNS, FormDSubmission


class FormDCsvWriter:
    """Key-person CSV; the column header is written once, on construction."""

    def __init__(self, stream: TextIO):
        self.stream = stream
        self.csv_writer = csv.writer(stream)
        self.csv_writer.writerow(FORM_D_CSV_COLUMNS)

    def write_submission(self, submission: FormDSubmission) -> int:
        rows = submission.to_rows()
        self.csv_writer.writerows(rows)
        self.stream.flush()
        return len(rows)


class PlainTextJsonWriter:

    def __init__(self, stream: TextIO):
        self.stream = stream

    def write_filing(self, record: FilingRecord, text: str) -> None:
        self.stream.write(json.dumps({
            "cik": record.entity_id,
            "source": record.source_locator,
            "hash": record.content_hash,
            "text": text,
        }))
        self.stream.write("\n")
