"""Splunk REST export client."""
import httpx
import structlog
import json
from typing import Dict, Any, List, Optional

from splunk_integration.config import SplunkConfig
from shared.exceptions import SplunkQueryError

logger = structlog.get_logger()

EXPORT_PATH = "/services/search/jobs/export"


class SplunkClient:
    """Runs one-shot searches against Splunk's export endpoint."""

    def __init__(
        self,
        config: Optional[SplunkConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.config = config or SplunkConfig()
        self.export_url = f"{self.config.base_url.rstrip('/')}{EXPORT_PATH}"
        self.headers = {
            "Authorization": f"Bearer {self.config.auth_token}",
            "Content-Type": "application/json"
        }
        self._transport = transport

    def _build_params(self, query: str) -> Dict[str, str]:
        # count=0 asks Splunk for every result
        return {
            "search": query,
            "output_mode": "json",
            "count": "0",
        }

    async def run_query(self, query: str) -> Dict[str, Any]:
        """Execute a Splunk search and return the decoded JSON payload.

        Raises:
            SplunkQueryError: On transport failure, non-2xx status, empty or
                undecodable body. No retry is attempted.
        """
        logger.info("Executing Splunk query", query=query[:100], url=self.export_url)

        async with httpx.AsyncClient(
            verify=self.config.verify,
            timeout=self.config.timeout,
            transport=self._transport
        ) as client:
            try:
                response = await client.get(
                    self.export_url,
                    params=self._build_params(query),
                    headers=self.headers
                )
            except httpx.HTTPError as e:
                logger.error("Splunk request failed", error=str(e), error_type=type(e).__name__)
                raise SplunkQueryError(f"Failed to execute Splunk query: {e}") from e

        if not response.is_success:
            snippet = (response.text or "").strip()[:500]
            logger.error("Splunk query failed", status_code=response.status_code, body=snippet)
            raise SplunkQueryError(
                f"Splunk query failed with status {response.status_code}",
                status_code=response.status_code
            )

        text = (response.text or "").strip()
        if not text:
            logger.error("Splunk returned an empty body", status_code=response.status_code)
            raise SplunkQueryError(
                "Splunk query returned an empty response body",
                status_code=response.status_code
            )

        payload = self._decode_body(text)
        if payload is None:
            logger.error("Splunk response body is not JSON", body=text[:500])
            raise SplunkQueryError(
                "Splunk query returned a body that is not JSON",
                status_code=response.status_code
            )

        results = payload.get("results")
        logger.info(
            "Splunk query executed successfully",
            results_count=len(results) if isinstance(results, list) else None
        )
        return payload

    @staticmethod
    def _decode_body(text: str) -> Optional[Dict[str, Any]]:
        """Decode a single JSON document or Splunk's newline-delimited export stream."""
        # First try: the whole payload as one JSON document.
        try:
            obj = json.loads(text)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(obj, list):
                return {"results": obj}
            if not isinstance(obj, dict):
                return None
            # A one-result export stream is a single line and parses as one document.
            if "results" not in obj and isinstance(obj.get("result"), dict):
                return SplunkClient._collect_stream([obj])
            return obj

        # Second try: NDJSON, one {"preview": ..., "result": {...}} object per line.
        objects: List[Dict[str, Any]] = []
        for line in text.splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(obj, dict):
                objects.append(obj)

        if not objects:
            return None
        return SplunkClient._collect_stream(objects)

    @staticmethod
    def _collect_stream(objects: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Merge export stream objects into ``{"results": [...], "messages": [...]}``."""
        final_rows: List[Dict[str, Any]] = []
        preview_rows: List[Dict[str, Any]] = []
        messages: List[Any] = []
        for obj in objects:
            if isinstance(obj.get("result"), dict):
                rows = preview_rows if obj.get("preview") is True else final_rows
                rows.append(obj["result"])
            if isinstance(obj.get("messages"), list):
                messages.extend(obj["messages"])

        # Preview rows are superseded by the final ones when Splunk sends both.
        return {"results": final_rows or preview_rows, "messages": messages}
