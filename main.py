#!/usr/bin/env python3
"""
PDF / image to text via the dots-ocr inference endpoint
Main CLI interface with page-by-page processing
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from utils.config import load_config
from utils.errors import PipelineError
from utils.logger import setup_logger, logger
from utils.output import LazyFileWriter
from utils.validators import validate_input_file

from extractors.format_detector import sniff_mime
from processors.pipeline_runner import PipelineRunner


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors"""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="pdf-ocr",
        description="Extract text from PDF or image files using the dots.ocr API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pdf-ocr document.pdf
  pdf-ocr document.pdf --page 2
  pdf-ocr document.pdf --output result.txt
  pdf-ocr photo.png
  cat document.pdf | pdf-ocr - --output result.txt

VLLM_TOKEN, API_PORT and API_HOST are read from the environment or a .env file.
        """
    )

    parser.add_argument(
        'file',
        help='PDF or image file (PNG, JPG, JPEG, TIFF, BMP, WEBP); "-" reads from stdin'
    )

    parser.add_argument(
        '--page',
        type=_positive_int,
        help='Process only page N of a PDF (default: all pages)'
    )

    parser.add_argument(
        '--output', '-o',
        dest='output_path',
        type=str,
        help='Write output to FILE instead of stdout'
    )

    parser.add_argument(
        '--workers',
        type=_positive_int,
        default=1,
        help='Pages recognized concurrently (default: 1, output order is unchanged)'
    )

    parser.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar on stderr'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def _read_stdin_document() -> Tuple[bytes, str]:
    """Read a document piped on stdin into memory"""
    data = sys.stdin.buffer.read()
    if not data:
        raise PipelineError("No input received on stdin")
    mime_type = sniff_mime(data)
    logger.info(f"Read {len(data)} bytes from stdin ({mime_type})")
    return data, mime_type


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point for the OCR pipeline"""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ValidationError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 1
    config.processing.workers = args.workers
    config.processing.show_progress = args.progress
    setup_logger(level="DEBUG" if args.verbose else "INFO", log_file=config.log_file)

    sink = LazyFileWriter(args.output_path) if args.output_path else sys.stdout

    try:
        if args.file == "-":
            data, mime_type = _read_stdin_document()
        else:
            input_path = validate_input_file(args.file)

        if args.output_path:
            logger.info(f"Output will be written to {args.output_path}")

        with PipelineRunner(config) as pipeline:
            if args.file == "-":
                pipeline.run_data(data, mime_type, page_number=args.page, sink=sink)
            else:
                pipeline.run(input_path, page_number=args.page, sink=sink)
        return 0
    except PipelineError as e:
        logger.error(f"❌ {e}")
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 1
    except Exception as e:
        logger.exception(f"Pipeline failed: {e}")
        return 1
    finally:
        if isinstance(sink, LazyFileWriter):
            sink.close()


if __name__ == "__main__":
    sys.exit(main())
