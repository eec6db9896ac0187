"""Custom exceptions for the Splunk aggregator."""
from typing import Optional


class SplunkAggregatorException(Exception):
    """Base exception for the Splunk aggregator."""
    pass


class SplunkQueryError(SplunkAggregatorException):
    """Splunk export query failed (transport error, non-2xx status or unusable body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CsvWriteError(SplunkAggregatorException):
    """Creating the output directory or writing the CSV file failed."""
    pass
