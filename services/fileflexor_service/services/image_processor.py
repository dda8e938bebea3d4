import os
import asyncio
from typing import Dict, Any
from PIL import Image
import logging

logger = logging.getLogger(__name__)

class ImageProcessor:
    """Handles image compression and format conversion"""
    
    async def compress_image(
        self, 
        input_path: str, 
        output_path: str, 
        quality: int = 80
    ) -> Dict[str, Any]:
        """
        Re-encode an image as JPEG
        
        The output is always JPEG data, whatever extension output_path carries.
        
        Args:
            input_path: Path to input image
            output_path: Path for output image
            quality: JPEG quality (1-100)
        
        Returns:
            Dict with processing results and metadata
        """
        try:
            return await asyncio.to_thread(self._compress_image, input_path, output_path, quality)
        except Exception as e:
            logger.error(f"Error compressing image {input_path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _compress_image(self, input_path: str, output_path: str, quality: int) -> Dict[str, Any]:
        with Image.open(input_path) as img:
            dimensions = img.size
            img = self._flatten(img)
            img.save(output_path, format='JPEG', quality=quality, optimize=True)
        
        original_size = os.path.getsize(input_path)
        output_size = os.path.getsize(output_path)
        
        return {
            'success': True,
            'dimensions': dimensions,
            'original_size_bytes': original_size,
            'output_size_bytes': output_size,
            'compression_ratio': output_size / original_size if original_size > 0 else 1,
            'format': 'JPEG',
            'quality': quality
        }
    
    async def convert_to_webp(
        self, 
        input_path: str, 
        output_path: str, 
        quality: int = 80
    ) -> Dict[str, Any]:
        """
        Convert an image to WebP, keeping transparency
        
        Args:
            input_path: Path to input image
            output_path: Path for output image
            quality: WebP quality (1-100)
        
        Returns:
            Dict with conversion results
        """
        try:
            return await asyncio.to_thread(self._convert_to_webp, input_path, output_path, quality)
        except Exception as e:
            logger.error(f"Error converting image {input_path} to WebP: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _convert_to_webp(self, input_path: str, output_path: str, quality: int) -> Dict[str, Any]:
        with Image.open(input_path) as img:
            original_format = img.format
            
            if img.mode not in ('RGB', 'RGBA'):
                img = img.convert('RGBA' if 'transparency' in img.info or img.mode in ('LA', 'PA') else 'RGB')
            save_kwargs = {
                'format': 'WEBP',
                'quality': quality,
                'method': 6
            }
            
            img.save(output_path, **save_kwargs)
            dimensions = img.size
            mode = img.mode
        
        original_size = os.path.getsize(input_path)
        output_size = os.path.getsize(output_path)
        
        return {
            'success': True,
            'original_format': original_format,
            'target_format': save_kwargs['format'],
            'original_size_bytes': original_size,
            'output_size_bytes': output_size,
            'size_ratio': output_size / original_size if original_size > 0 else 1,
            'dimensions': dimensions,
            'mode': mode
        }
    
    @staticmethod
    def _flatten(img: Image.Image) -> Image.Image:
        """Composite transparent images onto white so they can be stored as JPEG"""
        if img.mode in ('RGBA', 'LA', 'P'):
            if img.mode == 'P':
                img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        if img.mode not in ('RGB', 'L', 'CMYK'):
            return img.convert('RGB')
        return img
