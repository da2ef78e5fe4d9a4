"""Service configuration with environment variable overrides."""
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    catalog_path: Optional[Path] = None
    default_threshold: float = Field(default=90, ge=0, le=100)
    cache_size: int = Field(default=32, ge=1)
    log_level: str = "INFO"

    @property
    def catalog_file(self) -> Path:
        return self.catalog_path or self.data_dir / "receptors.json"


ENV_VARS = {
    "RECEPTOR_DATA_DIR": "data_dir",
    "RECEPTOR_CATALOG": "catalog_path",
    "RECEPTOR_DEFAULT_THRESHOLD": "default_threshold",
    "RECEPTOR_CACHE_SIZE": "cache_size",
    "RECEPTOR_LOG_LEVEL": "log_level",
}


def load_settings(environ: Optional[dict] = None) -> Settings:
    """Build settings from the environment; pydantic coerces the string values."""
    environ = os.environ if environ is None else environ
    overrides = {
        field: environ[var]
        for var, field in ENV_VARS.items()
        if environ.get(var)
    }
    return Settings(**overrides)
