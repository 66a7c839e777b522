"""
Validation utilities for the pipeline
"""

from pathlib import Path

from utils.errors import InputNotFoundError


def validate_input_file(file_path: str) -> Path:
    """
    Validate that the input document exists and is a regular file

    Args:
        file_path: Path to the PDF or image

    Returns:
        Resolved Path object

    Raises:
        InputNotFoundError: if the path is missing or not a file
    """
    path = Path(file_path)

    if not path.exists():
        raise InputNotFoundError(f"File not found: {file_path}")

    if not path.is_file():
        raise InputNotFoundError(f"Not a file: {file_path}")

    return path


def ensure_output_dir(output_path: str) -> Path:
    """
    Ensure the parent directory of an output file exists

    Args:
        output_path: Path to output file

    Returns:
        Path object for the file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
