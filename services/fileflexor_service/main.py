from fastapi import APIRouter, FastAPI, File, Depends, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager, suppress
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import asyncio
import logging
import uvicorn

from .config import Settings, StoragePaths
from .errors import FileFlexorError, InternalFailure
from .models import ConversionOptions, HealthResponse, ProcessRequest, ProcessResponse, UploadResponse
from .services.cleanup_registry import CleanupRegistry
from .services.download_service import DownloadService
from .services.processing_service import ProcessingService
from .services.upload_service import UploadService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service

def get_processing_service(request: Request) -> ProcessingService:
    return request.app.state.processing_service

def get_download_service(request: Request) -> DownloadService:
    return request.app.state.download_service

@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    upload_service: UploadService = Depends(get_upload_service)
):
    """Store a single uploaded file in the intake area"""
    try:
        uploaded = await upload_service.save_upload(file)
        return UploadResponse(file=uploaded)
    except FileFlexorError:
        raise
    except Exception as e:
        logger.error(f"Upload error: {str(e)}")
        raise InternalFailure("Upload failed")

@router.post("/process", response_model=ProcessResponse)
async def process_file(
    process_request: ProcessRequest,
    processing_service: ProcessingService = Depends(get_processing_service)
):
    """Compress or convert a previously uploaded file"""
    try:
        result = await processing_service.process_file(process_request)
        return ProcessResponse(result=result)
    except FileFlexorError:
        raise
    except Exception as e:
        logger.error(f"Processing error: {str(e)}")
        raise InternalFailure("Processing failed")

@router.get("/download/{filename}")
async def download_file(
    filename: str,
    download_service: DownloadService = Depends(get_download_service)
):
    """Send a processed file once; it is removed shortly afterwards"""
    try:
        path = download_service.resolve(filename)
        return FileResponse(
            path,
            media_type="application/octet-stream",
            filename=path.name,
            background=BackgroundTask(download_service.schedule_cleanup, path)
        )
    except FileFlexorError:
        raise
    except Exception as e:
        logger.error(f"Download error: {str(e)}")
        raise InternalFailure("Download failed")

@router.get("/conversions", response_model=ConversionOptions)
async def conversion_options(
    type: str = Query(..., description="Declared MIME type of the file"),
    processing_service: ProcessingService = Depends(get_processing_service)
):
    """List the operations available for a MIME type"""
    options = processing_service.list_conversions(type)
    return ConversionOptions(type=type, **options)

@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc).isoformat())

def register_error_handlers(app: FastAPI) -> None:
    """Map service errors to JSON bodies of the form {success, error, code}"""
    
    @app.exception_handler(FileFlexorError)
    async def handle_service_error(request: Request, exc: FileFlexorError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
    
    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get('msg', 'Invalid request') if errors else 'Invalid request'
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": message, "code": "INVALID_REQUEST"}
        )
    
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        is_api = request.url.path.startswith("/api/")
        if exc.status_code == status.HTTP_404_NOT_FOUND and not is_api and request.method in ("GET", "HEAD"):
            # Client-side routes of the front-end bundle all load its index page
            index_page = Path(request.app.state.settings.static_dir) / "index.html"
            if index_page.is_file():
                return FileResponse(index_page, media_type="text/html")

        if exc.status_code == status.HTTP_404_NOT_FOUND and is_api:
            message = "API endpoint not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": message, "code": "HTTP_ERROR"}
        )

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its storage directories and services"""
    settings = settings or Settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    paths = StoragePaths.from_settings(settings)
    
    cleanup_registry = CleanupRegistry(paths.all, orphan_max_age=settings.orphan_max_age)
    
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.app_name} (uploads: {paths.upload_dir}, processed: {paths.processed_dir})")
        sweeper = asyncio.create_task(cleanup_registry.run_forever(settings.cleanup_sweep_interval))
        
        yield
        
        # Shutdown
        logger.info(f"Shutting down {settings.app_name}...")
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        cleanup_registry.sweep()
    
    app = FastAPI(
        title=settings.app_name,
        description="Upload, compress and convert documents and images",
        version="1.0.0",
        lifespan=lifespan
    )
    
    app.state.settings = settings
    app.state.paths = paths
    app.state.cleanup_registry = cleanup_registry
    app.state.upload_service = UploadService(settings, paths)
    app.state.processing_service = ProcessingService(settings, paths, cleanup_registry)
    app.state.download_service = DownloadService(settings, paths, cleanup_registry)
    
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    register_error_handlers(app)
    app.include_router(router)
    
    # Built front-end bundle, when present, is served for every non-API path
    static_dir = Path(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="frontend")
    
    return app

def main():
    settings = Settings()
    uvicorn.run(
        "services.fileflexor_service.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development"
    )

if __name__ == "__main__":
    main()
