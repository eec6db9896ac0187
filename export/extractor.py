"""Locate the record list inside a Splunk response payload."""
from typing import Any, Callable, Dict, List, Optional
import structlog

logger = structlog.get_logger()

Record = Dict[str, Any]
ExtractionStrategy = Callable[[Dict[str, Any]], Optional[List[Record]]]

# Checked in this order before falling back to a scan of every value.
WELL_KNOWN_KEYS = ("results", "entry", "data")


def well_known_key(key: str) -> ExtractionStrategy:
    """Match ``payload[key]`` when it is a list, even an empty one."""
    def strategy(payload: Dict[str, Any]) -> Optional[List[Record]]:
        value = payload.get(key)
        if isinstance(value, list):
            return value
        return None
    strategy.__name__ = f"key:{key}"
    return strategy


def first_record_list(payload: Dict[str, Any]) -> Optional[List[Record]]:
    """Return the first top-level value that is a non-empty list of mappings."""
    for value in payload.values():
        if isinstance(value, list) and value and isinstance(value[0], dict):
            return value
    return None


class ResultExtractor:
    """Best-effort record extraction.

    Strategies are tried in order and the first one that returns a list wins.
    Unrecognized payload shapes yield ``None`` rather than an error.
    """

    def __init__(self, strategies: Optional[List[ExtractionStrategy]] = None):
        if strategies is None:
            strategies = [well_known_key(key) for key in WELL_KNOWN_KEYS]
            strategies.append(first_record_list)
        self.strategies = strategies

    def extract(self, payload: Optional[Dict[str, Any]]) -> Optional[List[Record]]:
        """Return the record list from ``payload`` or ``None`` if none is found."""
        if not isinstance(payload, dict):
            logger.warning("Splunk payload is not a mapping", payload_type=type(payload).__name__)
            return None

        for strategy in self.strategies:
            records = strategy(payload)
            if records is not None:
                logger.debug("Extracted records", strategy=strategy.__name__, count=len(records))
                return records

        logger.warning("No result list found in Splunk payload", keys=list(payload.keys()))
        return None
