"""Write Splunk result records to timestamped CSV files."""
from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Optional, Tuple

import structlog

from export.config import ExportConfig
from export.extractor import ResultExtractor
from shared.exceptions import CsvWriteError

logger = structlog.get_logger()

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def _cell(value: Any) -> str:
    """Render one record value as CSV cell text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        # Multi-value Splunk fields arrive as lists
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


class CsvResultWriter:
    """Serializes Splunk records into ``<prefix>_YYYYMMDD_HHMMSS.csv`` files."""

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        extractor: Optional[ResultExtractor] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or ExportConfig()
        self.output_dir = Path(self.config.output_directory)
        self.extractor = extractor or ResultExtractor()
        self._clock = clock

    def write_payload(self, payload: Dict[str, Any]) -> str:
        """Extract the record list from a raw Splunk payload and write it."""
        return self.write(self.extractor.extract(payload))

    def write(self, records: Optional[List[Dict[str, Any]]]) -> str:
        """Write ``records`` to a new CSV file and return its path.

        The header comes from the first record's keys. Missing and null values
        become empty cells. Entries that are not mappings are skipped. With no
        records an empty file is still created so the returned path always
        exists.

        Raises:
            CsvWriteError: If the directory or file cannot be created or written.
        """
        rows = [record for record in records or [] if isinstance(record, dict)]
        if records and len(rows) != len(records):
            logger.warning("Skipping non-mapping results", skipped=len(records) - len(rows))

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create output directory", directory=str(self.output_dir), error=str(e))
            raise CsvWriteError(f"Failed to create output directory {self.output_dir}: {e}") from e

        file_path, handle = self._create_unique_file()
        try:
            with handle:
                if not rows:
                    logger.warning("No results to write to CSV", file=str(file_path))
                    return str(file_path)
                row_count = self._write_rows(handle, rows)
        except OSError as e:
            logger.error("Error writing CSV file", file=str(file_path), error=str(e))
            file_path.unlink(missing_ok=True)
            raise CsvWriteError(f"Failed to write CSV file {file_path}: {e}") from e
        except Exception:
            file_path.unlink(missing_ok=True)
            raise

        logger.info("CSV file written successfully", file=str(file_path), rows=row_count)
        return str(file_path)

    def _write_rows(self, handle: IO[str], records: List[Dict[str, Any]]) -> int:
        headers = list(records[0].keys())
        writer = csv.writer(
            handle,
            quoting=csv.QUOTE_ALL if self.config.quote_all else csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )
        writer.writerow(headers)
        for record in records:
            writer.writerow([_cell(record.get(header)) for header in headers])
        return len(records)

    def _create_unique_file(self) -> Tuple[Path, IO[str]]:
        """Exclusively create the next free file name for the current second.

        Same-second exports get ``_1``, ``_2``... suffixes instead of
        overwriting each other.
        """
        stem = f"{self.config.file_prefix}_{self._clock().strftime(TIMESTAMP_FORMAT)}"
        candidate = self.output_dir / f"{stem}.csv"
        sequence = 0
        while True:
            try:
                return candidate, open(candidate, "x", newline="", encoding="utf-8")
            except FileExistsError:
                sequence += 1
                candidate = self.output_dir / f"{stem}_{sequence}.csv"
            except OSError as e:
                logger.error("Failed to create CSV file", file=str(candidate), error=str(e))
                raise CsvWriteError(f"Failed to create CSV file {candidate}: {e}") from e
