import pytest
from PIL import Image

from services.fileflexor_service.services.image_processor import ImageProcessor

class TestImageProcessor:
    """Test cases for ImageProcessor"""
    
    @pytest.fixture
    def image_processor(self):
        """Create image processor instance"""
        return ImageProcessor()
    
    @pytest.fixture
    def sample_image(self, temp_dir):
        """Create a sample image for testing"""
        image_path = temp_dir / "sample.jpg"
        img = Image.new('RGB', (800, 600), color='blue')
        img.save(image_path, 'JPEG', quality=95)
        return image_path
    
    @pytest.mark.asyncio
    async def test_compress_jpeg(self, image_processor, sample_image, temp_dir):
        """Test JPEG re-encoding at a lower quality"""
        output_path = temp_dir / "compressed.jpg"
        
        result = await image_processor.compress_image(str(sample_image), str(output_path), quality=50)
        
        assert result['success'] is True
        assert result['quality'] == 50
        assert output_path.stat().st_size > 0
        
        with Image.open(output_path) as img:
            assert img.format == 'JPEG'
            assert img.size == (800, 600)
    
    @pytest.mark.asyncio
    async def test_compress_png_writes_jpeg_data(self, image_processor, sample_png_file, temp_dir):
        """Test that PNG compression flattens transparency into JPEG data"""
        output_path = temp_dir / "compressed.png"
        
        result = await image_processor.compress_image(str(sample_png_file), str(output_path), quality=60)
        
        assert result['success'] is True
        with Image.open(output_path) as img:
            assert img.format == 'JPEG'
            assert img.mode == 'RGB'
    
    @pytest.mark.asyncio
    async def test_convert_to_webp(self, image_processor, sample_image, temp_dir):
        """Test format conversion from JPG to WebP"""
        output_path = temp_dir / "converted.webp"
        
        result = await image_processor.convert_to_webp(str(sample_image), str(output_path), quality=70)
        
        assert result['success'] is True
        assert result['target_format'] == 'WEBP'
        with Image.open(output_path) as img:
            assert img.format == 'WEBP'
            assert img.size == (800, 600)
    
    @pytest.mark.asyncio
    async def test_convert_png_to_webp_keeps_alpha(self, image_processor, sample_png_file, temp_dir):
        output_path = temp_dir / "converted.webp"
        
        result = await image_processor.convert_to_webp(str(sample_png_file), str(output_path))
        
        assert result['success'] is True
        assert result['mode'] == 'RGBA'
    
    @pytest.mark.asyncio
    async def test_compress_invalid_image(self, image_processor, temp_dir):
        """Test handling of invalid image file"""
        invalid_path = temp_dir / "invalid.jpg"
        invalid_path.write_text("This is not an image")
        output_path = temp_dir / "output.jpg"
        
        result = await image_processor.compress_image(str(invalid_path), str(output_path))
        
        assert result['success'] is False
        assert 'error' in result
    
    @pytest.mark.asyncio
    async def test_convert_invalid_image_to_webp(self, image_processor, temp_dir):
        invalid_path = temp_dir / "invalid.png"
        invalid_path.write_text("This is not an image")
        
        result = await image_processor.convert_to_webp(str(invalid_path), str(temp_dir / "out.webp"))
        
        assert result['success'] is False
        assert 'error' in result
