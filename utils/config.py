"""
Configuration management for the OCR client pipeline
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field
from dotenv import dotenv_values

PROJECT_DIR = Path(__file__).resolve().parent.parent

DEFAULT_TOKEN = "your-secret-token-here"
DEFAULT_PORT = 8000


class EndpointConfig(BaseModel):
    """Inference endpoint configuration"""
    host: str = Field(default="localhost")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    token: str = Field(default=DEFAULT_TOKEN)
    model: str = Field(default="dots-ocr")
    max_tokens: int = Field(default=2048)
    request_timeout: float = Field(default=120.0)
    health_timeout: float = Field(default=5.0)
    max_retries: int = Field(default=0, ge=0)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def chat_completions_url(self) -> str:
        return f"{self.base_url}/v1/chat/completions"


class ProcessingConfig(BaseModel):
    """Processing configuration"""
    image_dpi: int = Field(default=150)
    workers: int = Field(default=1, ge=1, le=32)
    show_progress: bool = Field(default=False)


class Config(BaseModel):
    """Main pipeline configuration"""
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    log_file: Optional[str] = Field(default=None)


def _load_env_files() -> None:
    """
    Load .env files into the process environment

    Only the working directory and the project directory are read, never
    their parents. Values from .env take precedence over variables already
    exported, and the working directory wins over the project directory.
    """
    values = {}
    for env_file in (PROJECT_DIR / ".env", Path.cwd() / ".env"):
        if env_file.is_file():
            values.update(dotenv_values(env_file))
    for key, value in values.items():
        if value is not None:
            os.environ[key] = value


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build the configuration once at process start

    Args:
        environ: Environment mapping to read from. When omitted, .env files
            are loaded and os.environ is used.

    Returns:
        Config value to pass to the pipeline components
    """
    if environ is None:
        _load_env_files()
        environ = os.environ

    endpoint = {}
    if environ.get("VLLM_TOKEN"):
        endpoint["token"] = environ["VLLM_TOKEN"]
    if environ.get("API_PORT"):
        endpoint["port"] = environ["API_PORT"]
    if environ.get("API_HOST"):
        endpoint["host"] = environ["API_HOST"]
    if environ.get("OCR_MODEL"):
        endpoint["model"] = environ["OCR_MODEL"]
    if environ.get("OCR_MAX_RETRIES"):
        endpoint["max_retries"] = environ["OCR_MAX_RETRIES"]

    return Config(
        endpoint=EndpointConfig(**endpoint),
        log_file=environ.get("OCR_LOG_FILE") or None,
    )
