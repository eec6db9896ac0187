import json
from datetime import datetime

import httpx
import pytest

from export.config import ExportConfig
from export.csv_writer import CsvResultWriter
from orchestrator.orchestrator import AggregationOrchestrator
from splunk_integration.client import SplunkClient
from splunk_integration.config import SplunkConfig

FIXED_NOW = datetime(2026, 10, 19, 14, 30, 5)


@pytest.fixture
def splunk_config():
    return SplunkConfig(base_url="https://splunk.example.com:8089", auth_token="test-token")


@pytest.fixture
def export_config(tmp_path):
    return ExportConfig(output_directory=str(tmp_path / "output"))


@pytest.fixture
def csv_writer(export_config):
    return CsvResultWriter(export_config, clock=lambda: FIXED_NOW)


class RecordingSplunk:
    """Fake Splunk export endpoint that records every request it receives."""

    def __init__(self, status_code=200, body=None, text=None, exc=None):
        self.status_code = status_code
        self.body = body
        self.text = text
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, content=json.dumps(self.body or {}).encode())

    def client(self, config: SplunkConfig) -> SplunkClient:
        return SplunkClient(config, transport=httpx.MockTransport(self))


@pytest.fixture
def make_orchestrator(splunk_config, csv_writer):
    def _make(fake: RecordingSplunk) -> AggregationOrchestrator:
        return AggregationOrchestrator(splunk_client=fake.client(splunk_config), csv_writer=csv_writer)
    return _make


@pytest.fixture
def fake_splunk():
    return RecordingSplunk
