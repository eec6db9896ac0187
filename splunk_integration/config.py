"""Splunk connection configuration."""
from pydantic_settings import BaseSettings
from typing import Optional

class SplunkConfig(BaseSettings):
    """Splunk connection settings, loaded once and shared read-only."""
    base_url: str = "https://localhost:8089"
    auth_token: Optional[str] = None
    # Kept for parity with deployments that configure basic auth; the export path uses the token.
    username: Optional[str] = None
    password: Optional[str] = None
    verify: bool = True
    timeout: Optional[float] = None  # None -> no client-side timeout
    
    class Config:
        env_file = ".env"
        env_prefix = "SPLUNK_"
        extra = "ignore"
        frozen = True
    
    def is_configured(self) -> bool:
        """Check if Splunk is properly configured."""
        return all([self.base_url, self.auth_token])
