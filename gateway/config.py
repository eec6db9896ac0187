"""Gateway configuration."""
from pydantic_settings import BaseSettings

class GatewayConfig(BaseSettings):
    """Gateway configuration."""
    api_title: str = "Splunk Aggregator"
    api_version: str = "1.0.0"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    
    class Config:
        env_file = ".env"
        env_prefix = "GATEWAY_"
        extra = "ignore"
        frozen = True
