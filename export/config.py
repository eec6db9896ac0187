"""CSV export configuration."""
from pydantic_settings import BaseSettings

class ExportConfig(BaseSettings):
    """CSV export configuration."""
    output_directory: str = "output"
    file_prefix: str = "splunk_results"
    quote_all: bool = False
    
    class Config:
        env_file = ".env"
        env_prefix = "EXPORT_"
        extra = "ignore"
        frozen = True
