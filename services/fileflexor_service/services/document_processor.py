import os
import asyncio
from typing import Dict, Any, List, Optional, Union
from pathlib import Path
from xml.sax.saxutils import escape
import logging
import fitz  # PyMuPDF
import docx
from reportlab.lib.pagesizes import letter, A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

class DocumentProcessor:
    """Handles PDF re-saving, page rendering and PDF generation"""
    
    async def resave_pdf(self, input_path: str, output_path: str) -> Dict[str, Any]:
        """
        Load a PDF's object structure and write it back out
        
        Unused objects are dropped and streams deflated on the way, but the
        document content is unchanged and the output is not guaranteed to be
        smaller than the input.
        """
        try:
            return await asyncio.to_thread(self._resave_pdf, input_path, output_path)
        except Exception as e:
            logger.error(f"Error re-saving PDF {input_path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _resave_pdf(self, input_path: str, output_path: str) -> Dict[str, Any]:
        doc = fitz.open(input_path)
        try:
            if not doc.is_pdf:
                raise ValueError("Input is not a PDF document")
            page_count = doc.page_count
            doc.save(output_path, garbage=4, deflate=True)
        finally:
            doc.close()
        
        original_size = os.path.getsize(input_path)
        output_size = os.path.getsize(output_path)
        
        return {
            'success': True,
            'page_count': page_count,
            'original_size_bytes': original_size,
            'output_size_bytes': output_size,
            'compression_ratio': output_size / original_size if original_size > 0 else 1
        }
    
    async def render_page_to_image(
        self,
        pdf_path: str,
        output_path: str,
        page_number: int = 0,
        quality: int = 80,
        dpi: int = 150
    ) -> Dict[str, Any]:
        """
        Render one PDF page to a JPEG image
        
        Args:
            pdf_path: Path to PDF file
            output_path: Path for output JPEG
            page_number: Zero-based page index
            quality: JPEG quality
            dpi: Rendering resolution
        
        Returns:
            Dict with rendering results
        """
        try:
            return await asyncio.to_thread(
                self._render_page_to_image, pdf_path, output_path, page_number, quality, dpi
            )
        except Exception as e:
            logger.error(f"Error rendering page {page_number} of {pdf_path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _render_page_to_image(
        self, pdf_path: str, output_path: str, page_number: int, quality: int, dpi: int
    ) -> Dict[str, Any]:
        doc = fitz.open(pdf_path)
        try:
            if page_number >= doc.page_count:
                raise ValueError(f"Page {page_number + 1} does not exist ({doc.page_count} pages)")
            page_count = doc.page_count
            pix = doc[page_number].get_pixmap(dpi=dpi, alpha=False)
            img = PILImage.frombytes("RGB", (pix.width, pix.height), pix.samples)
            pix = None
        finally:
            doc.close()
        
        img.save(output_path, 'JPEG', quality=quality, optimize=True)
        
        return {
            'success': True,
            'page': page_number + 1,
            'page_count': page_count,
            'dimensions': img.size,
            'dpi': dpi,
            'output_size_bytes': os.path.getsize(output_path)
        }
    
    async def generate_pdf_from_image(self, image_path: str, output_path: str) -> Dict[str, Any]:
        """
        Embed an image into a new single-page PDF
        
        The page is sized to the image's pixel dimensions (one point per
        pixel) and the image fills it.
        """
        try:
            return await asyncio.to_thread(self._generate_pdf_from_image, image_path, output_path)
        except Exception as e:
            logger.error(f"Error generating PDF from image {image_path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _generate_pdf_from_image(self, image_path: str, output_path: str) -> Dict[str, Any]:
        with PILImage.open(image_path) as img:
            width, height = img.size
        
        ext = Path(image_path).suffix.lower()
        pdf = canvas.Canvas(output_path, pagesize=(width, height))
        
        if ext == '.png':
            # Decoded and re-embedded with Flate; alpha kept as a soft mask
            pdf.drawImage(ImageReader(image_path), 0, 0, width=width, height=height, mask='auto')
            embedding = 'png'
        else:
            # JPEG data passes through untouched (DCTDecode)
            pdf.drawImage(image_path, 0, 0, width=width, height=height)
            embedding = 'jpeg'
        
        pdf.showPage()
        pdf.save()
        
        return {
            'success': True,
            'output_path': output_path,
            'page_size': (width, height),
            'embedding': embedding,
            'file_size_bytes': os.path.getsize(output_path)
        }
    
    async def extract_text_from_docx(self, docx_path: str) -> Dict[str, Any]:
        """
        Extract paragraphs, tables and core properties from a DOCX document
        
        Args:
            docx_path: Path to DOCX file
        
        Returns:
            Dict with extracted content and metadata
        """
        try:
            doc = await asyncio.to_thread(docx.Document, docx_path)
            
            paragraphs = []
            for para in doc.paragraphs:
                if para.text.strip():
                    paragraphs.append({
                        'text': para.text,
                        'style': para.style.name if para.style else 'Normal'
                    })
            
            tables = []
            for table_index, table in enumerate(doc.tables):
                table_data = [[cell.text for cell in row.cells] for row in table.rows]
                tables.append({
                    'table_index': table_index,
                    'data': table_data,
                    'rows': len(table_data),
                    'columns': len(table_data[0]) if table_data else 0
                })
            
            core_props = doc.core_properties
            metadata = {
                'title': core_props.title or '',
                'author': core_props.author or '',
                'subject': core_props.subject or ''
            }
            
            return {
                'success': True,
                'paragraphs': paragraphs,
                'tables': tables,
                'metadata': metadata,
                'total_paragraphs': len(paragraphs)
            }
            
        except Exception as e:
            logger.error(f"Error extracting text from DOCX {docx_path}: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    async def generate_pdf_from_text(
        self,
        text_content: Union[str, List[str]],
        output_path: str,
        title: Optional[str] = "Generated Document",
        author: str = "",
        font_size: int = 12,
        page_size: str = "A4"
    ) -> Dict[str, Any]:
        """
        Generate PDF from text content
        
        Args:
            text_content: Text content (string or list of paragraphs)
            output_path: Path for output PDF
            title: Document title
            author: Document author
            font_size: Base font size
            page_size: Page size (A4, letter)
        
        Returns:
            Dict with generation results
        """
        try:
            return await asyncio.to_thread(
                self._generate_pdf_from_text, text_content, output_path, title, author, font_size, page_size
            )
        except Exception as e:
            logger.error(f"Error generating PDF from text: {str(e)}")
            return {
                'success': False,
                'error': str(e)
            }
    
    def _generate_pdf_from_text(
        self,
        text_content: Union[str, List[str]],
        output_path: str,
        title: Optional[str],
        author: str,
        font_size: int,
        page_size: str
    ) -> Dict[str, Any]:
        pagesize = A4 if page_size.upper() == "A4" else letter
        
        doc = SimpleDocTemplate(
            output_path,
            pagesize=pagesize,
            rightMargin=72,
            leftMargin=72,
            topMargin=72,
            bottomMargin=18,
            title=title or '',
            author=author
        )
        
        styles = getSampleStyleSheet()
        title_style = styles['Title']
        normal_style = styles['Normal']
        title_style.fontSize = font_size + 8
        title_style.leading = font_size + 12
        normal_style.fontSize = font_size
        normal_style.leading = font_size + 4
        
        story = []
        
        if title:
            story.append(Paragraph(escape(title), title_style))
            story.append(Spacer(1, 12))
        
        if isinstance(text_content, str):
            paragraphs = text_content.split('\n\n')
        else:
            paragraphs = text_content
        
        for para in paragraphs:
            if para.strip():
                # Paragraph takes XML markup, so the text is escaped and
                # line breaks kept explicitly
                story.append(Paragraph(escape(para).replace('\n', '<br/>'), normal_style))
                story.append(Spacer(1, 6))
        
        # An empty story still has to produce a valid single page
        if not story:
            story.append(Spacer(1, 1))
        
        doc.build(story)
        
        return {
            'success': True,
            'output_path': output_path,
            'file_size_bytes': os.path.getsize(output_path),
            'paragraphs': len(paragraphs),
            'title': title,
            'author': author,
            'font_size': font_size,
            'page_size': page_size
        }
    
    async def convert_document_format(
        self,
        input_path: str,
        output_path: str,
        target_format: str
    ) -> Dict[str, Any]:
        """
        Convert document to different format
        
        Only DOCX to PDF is handled; layout is reduced to text paragraphs
        followed by table rows.
        """
        input_ext = Path(input_path).suffix.lower()
        target_ext = target_format.lower().lstrip('.')
        
        if input_ext == '.docx' and target_ext == 'pdf':
            result = await self.extract_text_from_docx(input_path)
            if not result['success']:
                return result
            
            paragraphs = [para['text'] for para in result['paragraphs']]
            for table in result['tables']:
                for row in table['data']:
                    paragraphs.append("\t".join(row))
            
            return await self.generate_pdf_from_text(
                paragraphs,
                output_path,
                title=result['metadata'].get('title') or None,
                author=result['metadata'].get('author', '')
            )
        
        return {
            'success': False,
            'error': f'Conversion from {input_ext} to {target_ext} not supported'
        }
