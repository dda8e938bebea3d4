from typing import Awaitable, Callable, Dict, Any, Tuple
from pathlib import Path
import logging

from ..config import Settings, StoragePaths
from ..errors import (
    FileNotFound, InternalFailure, InvalidFilename, MissingParameter,
    UnsupportedConversion, UnsupportedOperation
)
from ..models import Operation, ProcessRequest, ProcessedResult
from ..utils import MIME_TYPE_EXTENSIONS, clamp_quality, format_file_size, is_bare_filename
from .cleanup_registry import CleanupRegistry
from .image_processor import ImageProcessor
from .document_processor import DocumentProcessor

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png')

# Alternative spellings accepted for target formats
FORMAT_ALIASES = {'jpeg': 'jpg'}

Transform = Callable[[Path, Path, int], Awaitable[Dict[str, Any]]]

class ProcessingService:
    """Dispatches compress and convert requests to the matching transform"""
    
    def __init__(self, settings: Settings, paths: StoragePaths, cleanup_registry: CleanupRegistry):
        self.settings = settings
        self.paths = paths
        self.cleanup_registry = cleanup_registry
        
        # Initialize processors
        self.image_processor = ImageProcessor()
        self.document_processor = DocumentProcessor()
        
        self.compressors = self._create_compressors()
        self.conversions = self._create_conversions()
    
    def _create_compressors(self) -> Dict[str, Transform]:
        """Compression transform per source extension"""
        compressors = {ext: self._compress_image for ext in IMAGE_EXTENSIONS}
        compressors['.pdf'] = self._compress_pdf
        return compressors
    
    def _create_conversions(self) -> Dict[Tuple[str, str], Transform]:
        """Conversion transform per (source extension, target format)"""
        conversions = {}
        for ext in IMAGE_EXTENSIONS:
            conversions[(ext, 'webp')] = self._convert_image_to_webp
            conversions[(ext, 'pdf')] = self._convert_image_to_pdf
        conversions[('.pdf', 'jpg')] = self._convert_pdf_to_jpg
        conversions[('.docx', 'pdf')] = self._convert_docx_to_pdf
        return conversions
    
    def list_conversions(self, mime_type: str) -> Dict[str, Any]:
        """Operations available for a declared MIME type"""
        ext = MIME_TYPE_EXTENSIONS.get(mime_type)
        if ext is None:
            return {'can_compress': False, 'target_formats': []}
        
        return {
            'can_compress': ext in self.compressors,
            'target_formats': sorted(fmt for (src, fmt) in self.conversions if src == ext)
        }
    
    @staticmethod
    def normalize_format(target_format: str) -> str:
        fmt = target_format.strip().lower().lstrip('.')
        return FORMAT_ALIASES.get(fmt, fmt)
    
    async def process_file(self, request: ProcessRequest) -> ProcessedResult:
        """
        Run one compress or convert request
        
        Args:
            request: Identifier of an uploaded file, the operation and its options
        
        Returns:
            The processed file and its download reference
        
        Raises:
            MissingParameter, InvalidFilename, FileNotFound,
            UnsupportedOperation, UnsupportedConversion, InternalFailure
        """
        if not request.file_id or not request.operation:
            raise MissingParameter("Missing required parameters")
        
        if not is_bare_filename(request.file_id):
            raise InvalidFilename(request.file_id)
        
        input_path = self.paths.upload_dir / request.file_id
        if not input_path.is_file():
            raise FileNotFound(request.file_id)
        
        ext = input_path.suffix.lower()
        base_name = input_path.stem
        quality = clamp_quality(
            request.quality,
            default=self.settings.default_quality,
            low=self.settings.min_quality,
            high=self.settings.max_quality
        )
        
        if request.operation == Operation.COMPRESS.value:
            transform = self.compressors.get(ext)
            if transform is None:
                raise UnsupportedOperation("Compression not supported for this file type", {'source': ext})
            output_path = self.paths.processed_dir / f"{base_name}_compressed{input_path.suffix}"
        
        elif request.operation == Operation.CONVERT.value:
            if not request.target_format:
                raise MissingParameter("Target format required for conversion", field="targetFormat")
            target = self.normalize_format(request.target_format)
            transform = self.conversions.get((ext, target))
            if transform is None:
                raise UnsupportedConversion(ext, target)
            output_path = self.paths.processed_dir / f"{base_name}_converted.{target}"
        
        else:
            raise UnsupportedOperation("Invalid operation", {'operation': request.operation})
        
        result = await self._run_transform(transform, input_path, output_path, quality)
        
        output_size = output_path.stat().st_size
        
        # The input is no longer needed once the output exists
        self.cleanup_registry.schedule(input_path, self.settings.input_cleanup_delay)
        
        logger.info(
            f"Processed {input_path.name} ({request.operation}) -> {output_path.name} "
            f"({format_file_size(output_size)})"
        )
        
        return ProcessedResult(
            filename=output_path.name,
            size=output_size,
            formatted_size=format_file_size(output_size),
            download_url=f"/api/download/{output_path.name}"
        )
    
    async def _run_transform(
        self, transform: Transform, input_path: Path, output_path: Path, quality: int
    ) -> Dict[str, Any]:
        """Run a transform, leaving no output behind unless it fully succeeded"""
        try:
            result = await transform(input_path, output_path, quality)
        except Exception as e:
            logger.error(f"Transform of {input_path.name} raised: {str(e)}")
            result = {'success': False, 'error': str(e)}
        
        if not result.get('success') or not output_path.is_file():
            output_path.unlink(missing_ok=True)
            raise InternalFailure(
                "Processing failed",
                {'error': result.get('error', 'No output produced')}
            )
        
        return result
    
    async def _compress_image(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        """Re-encode as JPEG, keeping the original extension"""
        return await self.image_processor.compress_image(str(input_path), str(output_path), quality=quality)
    
    async def _compress_pdf(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        """Structural re-save; quality does not apply"""
        return await self.document_processor.resave_pdf(str(input_path), str(output_path))
    
    async def _convert_image_to_webp(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        return await self.image_processor.convert_to_webp(str(input_path), str(output_path), quality=quality)
    
    async def _convert_image_to_pdf(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        return await self.document_processor.generate_pdf_from_image(str(input_path), str(output_path))
    
    async def _convert_pdf_to_jpg(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        """Render the first page"""
        return await self.document_processor.render_page_to_image(
            str(input_path), str(output_path), page_number=0, quality=quality
        )
    
    async def _convert_docx_to_pdf(self, input_path: Path, output_path: Path, quality: int) -> Dict[str, Any]:
        return await self.document_processor.convert_document_format(str(input_path), str(output_path), 'pdf')
