"""
FileFlexor Service - upload, compress and convert documents and images

This service provides:
- Single-file uploads into an intake area
- Image compression and PDF re-saving
- Format conversion (image to WebP/PDF, PDF to JPG, DOCX to PDF)
- One-shot downloads of processed results with scheduled cleanup
"""

__version__ = "1.0.0"
__author__ = "FileFlexor"
