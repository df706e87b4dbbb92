"""
Scan Cleaning Pipeline
======================

Turns a scanned document into clean, corrected plain text.

Main components:
- Rasterization of PDF pages to images
- Edge-density detection of text-bearing pages
- Density clustering of edges into text regions (optional crop)
- Parallel page OCR with ordered reassembly
- Deterministic text cleaning
- Rule-based grammar correction
"""

__version__ = "1.0.0"
__author__ = "Scan Cleaning Team"
