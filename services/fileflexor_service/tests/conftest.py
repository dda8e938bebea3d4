import pytest
import tempfile
import shutil
import time
from pathlib import Path

import httpx
from PIL import Image

from services.fileflexor_service.config import Settings, StoragePaths
from services.fileflexor_service.main import create_app
from services.fileflexor_service.services.cleanup_registry import CleanupRegistry
from services.fileflexor_service.services.processing_service import ProcessingService
from services.fileflexor_service.services.upload_service import UploadService
from services.fileflexor_service.services.download_service import DownloadService

class FakeClock:
    """Manually advanced clock for cleanup timing"""
    
    def __init__(self, start: float = None):
        self.now = time.time() if start is None else start
    
    def __call__(self) -> float:
        return self.now
    
    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now

@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)

@pytest.fixture
def test_settings(temp_dir):
    """Create test settings"""
    return Settings(
        environment="testing",
        upload_dir=str(temp_dir / "uploads"),
        processed_dir=str(temp_dir / "processed"),
        static_dir=str(temp_dir / "dist"),
        allowed_origins="*"
    )

@pytest.fixture
def storage_paths(test_settings):
    return StoragePaths.from_settings(test_settings)

@pytest.fixture
def fake_clock():
    return FakeClock()

@pytest.fixture
def cleanup_registry(storage_paths, test_settings, fake_clock):
    return CleanupRegistry(storage_paths.all, orphan_max_age=test_settings.orphan_max_age, clock=fake_clock)

@pytest.fixture
def processing_service(test_settings, storage_paths, cleanup_registry):
    """Create processing service instance"""
    return ProcessingService(test_settings, storage_paths, cleanup_registry)

@pytest.fixture
def upload_service(test_settings, storage_paths):
    return UploadService(test_settings, storage_paths)

@pytest.fixture
def download_service(test_settings, storage_paths, cleanup_registry):
    return DownloadService(test_settings, storage_paths, cleanup_registry)

@pytest.fixture
def app(test_settings, fake_clock):
    """Application whose cleanup registry runs on the fake clock"""
    application = create_app(test_settings)
    application.state.cleanup_registry.clock = fake_clock
    return application

@pytest.fixture
async def test_client(app):
    """Create test client for FastAPI app"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

@pytest.fixture
def sample_image_file(temp_dir):
    """Create a sample JPEG image for testing"""
    image_path = temp_dir / "test_image.jpg"
    img = Image.new('RGB', (120, 80), color='red')
    img.save(image_path, 'JPEG', quality=95)
    
    return image_path

@pytest.fixture
def sample_png_file(temp_dir):
    """Create a sample PNG image with transparency for testing"""
    image_path = temp_dir / "test_image.png"
    img = Image.new('RGBA', (64, 48), color=(0, 128, 255, 128))
    img.save(image_path, 'PNG')
    
    return image_path

@pytest.fixture
def sample_pdf_file(temp_dir):
    """Create a sample PDF file for testing"""
    from reportlab.pdfgen import canvas
    from reportlab.lib.pagesizes import letter
    
    pdf_path = temp_dir / "test_document.pdf"
    c = canvas.Canvas(str(pdf_path), pagesize=letter)
    c.drawString(100, 750, "Test PDF Document")
    c.drawString(100, 730, "This is a test PDF for processing.")
    c.showPage()
    c.drawString(100, 750, "Second page content")
    c.save()
    
    return pdf_path

@pytest.fixture
def sample_docx_file(temp_dir):
    """Create a sample DOCX file for testing"""
    from docx import Document
    
    doc_path = temp_dir / "test_document.docx"
    doc = Document()
    doc.add_heading("Quarterly Report", 0)
    doc.add_paragraph("Revenue grew by 12% & costs fell.")
    doc.add_paragraph("Outlook <stable>.")
    
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "Region"
    table.cell(0, 1).text = "Sales"
    table.cell(1, 0).text = "North"
    table.cell(1, 1).text = "42"
    
    doc.save(str(doc_path))
    return doc_path

@pytest.fixture
def stage_upload(storage_paths):
    """Copy a file into the intake area under an upload-style identifier"""
    def _stage(source: Path, file_id: str = None) -> str:
        file_id = file_id or f"file-1700000000000-123456789{source.suffix}"
        shutil.copy(source, storage_paths.upload_dir / file_id)
        return file_id
    return _stage
