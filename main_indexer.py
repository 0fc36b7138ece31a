import argparse
import logging
import sys
from typing import Optional

from edgar_index.settings import app_settings
from edgar_index.filing_index import FilingIndex
from edgar_index.data_collection.master_index import iter_master_index
from edgar_index.data_export.writers import FormDCsvWriter, PlainTextJsonWriter
from edgar_index.data_models.filing_models import FilingRecord
from edgar_index.errors import FilingIndexError


logger = logging.getLogger("edgar_index")


class FilingIndexRunner:

    def __init__(self, data_directory: str):
        self.filing_index = FilingIndex(data_directory=data_directory)
        print("✓ Opened filing index in", data_directory)

    def fetch_filings(self, master_index_path: str, form_type: str, include_amended: bool) -> int:
        ingested = 0
        with open(master_index_path, encoding="latin-1") as master_index:
            for entry in iter_master_index(master_index, form_type, include_amended):
                print(f"Fetching form {entry.form_type} about {entry.company_name} from {entry.file_name}")
                self.filing_index.put(entry.cik, entry.file_name, entry.form_type, entry.date_filed)
                ingested += 1
        print(f"✓ Processed {ingested} filings, catalog holds {self.filing_index.catalog.count()}")
        return ingested

    def export_form_d(self, output_path: str, exclude_amendments: bool) -> None:
        with open(output_path, "w", newline="", encoding="utf-8") as output:
            writer = FormDCsvWriter(output)

            def handle(record: Optional[FilingRecord], error: Optional[Exception]) -> bool:
                if error is not None:
                    logger.error("%s", error)
                    return True
                try:
                    submission = self.filing_index.parse_form_d(record.content_hash)
                except FilingIndexError as e:
                    logger.warning("%s: %s", record.content_hash, e)
                    return False
                writer.write_submission(submission)
                return False

            self.filing_index.most_recent_of_type("D", handle, exclude_amendments=exclude_amendments)

    def export_plain_text(self, form_type: str, output_path: str, max_filings: int, exclude_amendments: bool) -> None:
        written = 0
        with open(output_path, "w", encoding="utf-8") as output:
            writer = PlainTextJsonWriter(output)

            def handle(record: Optional[FilingRecord], error: Optional[Exception]) -> bool:
                nonlocal written
                if error is not None:
                    logger.error("%s", error)
                    return True
                try:
                    text = self.filing_index.get_plain_text(record.content_hash).read()
                except FilingIndexError as e:
                    logger.warning("%s: %s", record.content_hash, e)
                    return False
                writer.write_filing(record, text)
                written += 1
                return written >= max_filings

            self.filing_index.most_recent_of_type(form_type, handle, exclude_amendments=exclude_amendments)
        print(f"✓ Wrote {written} {form_type} filings to {output_path}")

    def close(self) -> None:
        self.filing_index.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Index and extract SEC EDGAR filings")
    subcommands = parser.add_subparsers(dest="command", required=True)

    fetch = subcommands.add_parser("fetch", help="ingest filings listed in a master index")
    fetch.add_argument("-i", dest="master_index", default="master.idx", help="path to decompressed SEC master index file")
    fetch.add_argument("-f", dest="form_type", default="10-K", help="form type to download")
    fetch.add_argument("-a", dest="include_amended", action="store_true", help="also download amended forms")
    fetch.add_argument("-o", dest="data_directory", default=app_settings.DATA_DIRECTORY, help="data directory")

    process = subcommands.add_parser("process", help="export the latest filing of a form per company")
    process.add_argument("-f", dest="form_type", default="10-K", help="form type to export; D writes Form D CSV")
    process.add_argument("-d", dest="data_directory", default=app_settings.DATA_DIRECTORY, help="data directory")
    process.add_argument("-o", dest="output", default=None, help="output file")
    process.add_argument("-m", dest="max_filings", type=int, default=10000000, help="maximum number of filings to process")
    process.add_argument("--exclude-amendments", action="store_true", help="ignore /A filings when picking the latest")
    return parser


def main(argv=None) -> int:
    arguments = build_parser().parse_args(argv)
    logging.basicConfig(
        level=app_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    runner = FilingIndexRunner(arguments.data_directory)
    try:
        if arguments.command == "fetch":
            runner.fetch_filings(arguments.master_index, arguments.form_type, arguments.include_amended)
        elif arguments.form_type == "D":
            runner.export_form_d(arguments.output or "D.csv", arguments.exclude_amendments)
        else:
            runner.export_plain_text(
                arguments.form_type,
                arguments.output or f"{arguments.form_type.replace('/', '_')}.json",
                arguments.max_filings,
                arguments.exclude_amendments,
            )
    except FilingIndexError as e:
        print(f"\nError: {str(e)}")
        return 1
    finally:
        runner.close()

    print("\n✓ Completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
