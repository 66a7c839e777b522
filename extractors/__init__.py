"""
Input detection and OCR endpoint access
"""

from .format_detector import detect_document, detect_mime, is_paginated, sniff_mime
from .health import HealthGate, check_healthy
from .ocr_client import OcrClient

__all__ = [
    'detect_document',
    'detect_mime',
    'is_paginated',
    'sniff_mime',
    'HealthGate',
    'check_healthy',
    'OcrClient'
]
