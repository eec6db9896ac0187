"""Aggregation flow: run a Splunk query and export the results to CSV."""
import time
import structlog

from splunk_integration.client import SplunkClient
from export.csv_writer import CsvResultWriter

logger = structlog.get_logger()

class AggregationOrchestrator:
    """Runs the query -> extract -> write sequence for one request."""
    
    def __init__(self, splunk_client: SplunkClient, csv_writer: CsvResultWriter):
        self.splunk_client = splunk_client
        self.csv_writer = csv_writer
    
    async def aggregate(self, query: str) -> str:
        """Execute ``query`` against Splunk and return the path of the written CSV file."""
        start_time = time.time()
        logger.info("Starting aggregation", query=query[:100])
        
        payload = await self.splunk_client.run_query(query)
        file_path = self.csv_writer.write_payload(payload)
        
        logger.info(
            "Aggregation completed",
            file=file_path,
            duration_ms=round((time.time() - start_time) * 1000, 2)
        )
        return file_path
