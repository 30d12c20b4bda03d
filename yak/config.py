"""
Client configuration management
"""
from pathlib import Path
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Yak client settings"""

    model_config = SettingsConfigDict(env_prefix="YAK_", env_file=".env", extra="ignore")

    # Connection defaults
    default_host: str = "127.0.0.1"  # used when connect() gets host=None
    connect_timeout: Optional[float] = Field(default=None, gt=0)  # seconds, None blocks
    socket_timeout: Optional[float] = Field(default=None, gt=0)  # applied after connect, None blocks

    # Framing
    header_size: int = Field(default=32, ge=5)  # bytes reserved for "T:<digits>\n" plus terminator
    max_receive_bytes: Optional[int] = Field(default=None, ge=0)  # cap for allocating receive

    # Logging
    log_dir: Optional[Path] = None
    log_level: str = "INFO"


settings = Settings()
