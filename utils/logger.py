"""
Logging utilities for the OCR pipeline

Everything here writes to stderr; stdout is reserved for recognized text.
"""

import sys
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeRemainingColumn

# Configure console for rich output
console = Console(stderr=True)

# Configure logger
logger.remove()  # Remove default handler
logger.add(
    sys.stderr,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
    level="INFO"
)


def get_progress_bar() -> Progress:
    """Create a progress bar for page recognition"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeRemainingColumn(),
        console=console,
        transient=True
    )


def log_step(step: str, description: str = ""):
    """Log a pipeline step"""
    logger.debug(f"[STEP] {step}: {description}")
    if console.is_terminal:
        console.print(f"[bold blue]→[/bold blue] {step}", style="bold")
        if description:
            console.print(f"  {description}", style="dim")


def setup_logger(level: str = "INFO", log_file: Optional[str] = None):
    """
    Setup logger with specified level

    Args:
        level: Logging level for stderr
        log_file: Optional file that receives DEBUG-level logs
    """
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level.upper()
    )
    if log_file:
        logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            level="DEBUG"
        )
    return logger


__all__ = ['logger', 'console', 'get_progress_bar', 'log_step', 'setup_logger']
