"""
Service modules for upload, processing and download
"""

from .processing_service import ProcessingService
from .upload_service import UploadService
from .download_service import DownloadService
from .cleanup_registry import CleanupRegistry
from .image_processor import ImageProcessor
from .document_processor import DocumentProcessor

__all__ = [
    'ProcessingService',
    'UploadService',
    'DownloadService',
    'CleanupRegistry',
    'ImageProcessor',
    'DocumentProcessor'
]
