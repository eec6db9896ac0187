"""FastAPI application entry point."""
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uuid
import structlog

from gateway.config import GatewayConfig
from gateway.models import AggregateRequest, AggregateResponse, ErrorResponse
from orchestrator.orchestrator import AggregationOrchestrator
from splunk_integration.client import SplunkClient
from splunk_integration.config import SplunkConfig
from export.config import ExportConfig
from export.csv_writer import CsvResultWriter
from shared.logger import setup_logging

config = GatewayConfig()
logger = setup_logging(config.log_level)
# Settings are read once here and handed to the components; nothing else reads the environment.
splunk_config = SplunkConfig()
export_config = ExportConfig()


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    """Log effective settings on startup and shutdown."""
    logger.info(
        "Starting Splunk Aggregator",
        splunk_url=splunk_config.base_url,
        output_directory=export_config.output_directory,
    )
    if not splunk_config.is_configured():
        logger.warning("Splunk auth token not configured; queries will be rejected by Splunk")
    try:
        yield
    finally:
        logger.info("Shutting down Splunk Aggregator")


app = FastAPI(title=config.api_title, version=config.api_version, lifespan=app_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.orchestrator = AggregationOrchestrator(
    splunk_client=SplunkClient(splunk_config),
    csv_writer=CsvResultWriter(export_config),
)


def get_orchestrator(request: Request) -> AggregationOrchestrator:
    """Resolve the process-wide orchestrator."""
    return request.app.state.orchestrator


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Tag every log line emitted while serving a request with a request id."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=str(uuid.uuid4()))
    try:
        return await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

@app.post(
    f"{config.api_prefix}/aggregate",
    response_model=AggregateResponse,
    responses={500: {"model": ErrorResponse}},
)
async def aggregate(
    request: AggregateRequest,
    orchestrator: AggregationOrchestrator = Depends(get_orchestrator),
):
    """Run a Splunk query and export its results to a CSV file."""
    logger.info("Received aggregation request", query=request.query)

    try:
        file_path = await orchestrator.aggregate(request.query)
    except Exception as e:
        logger.error("Error during aggregation", error=str(e), error_type=type(e).__name__, exc_info=True)
        error = ErrorResponse(message=str(e) or type(e).__name__)
        return JSONResponse(status_code=500, content=error.model_dump())

    logger.info("Aggregation request completed", file=file_path)
    return AggregateResponse(file=file_path)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.host, port=config.port)
