"""
Processor modules for the page-based OCR pipeline
"""

from .page_splitter import PageSplitter
from .pipeline_runner import PipelineRunner, PipelineState

__all__ = [
    'PageSplitter',
    'PipelineRunner',
    'PipelineState'
]
