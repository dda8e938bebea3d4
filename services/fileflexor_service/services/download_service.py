from pathlib import Path
import logging

from ..config import Settings, StoragePaths
from ..errors import FileNotFound, InvalidFilename
from ..utils import is_bare_filename
from .cleanup_registry import CleanupRegistry

logger = logging.getLogger(__name__)

class DownloadService:
    """Resolves download tokens to files in the results area"""
    
    def __init__(self, settings: Settings, paths: StoragePaths, cleanup_registry: CleanupRegistry):
        self.settings = settings
        self.paths = paths
        self.cleanup_registry = cleanup_registry
    
    def resolve(self, filename: str) -> Path:
        """
        Map a download token to a processed file
        
        Raises:
            InvalidFilename: token is not a bare filename
            FileNotFound: no such file in the results area
        """
        if not is_bare_filename(filename):
            logger.warning(f"Rejected download token {filename!r}")
            raise InvalidFilename(filename)
        
        path = self.paths.processed_dir / filename
        if path.resolve().parent != self.paths.processed_dir:
            raise InvalidFilename(filename)
        
        if not path.is_file():
            raise FileNotFound(filename)
        
        return path
    
    async def schedule_cleanup(self, path: Path) -> None:
        """Runs as a response background task, on the event loop"""
        self.cleanup_registry.schedule(path, self.settings.download_cleanup_delay)
        logger.info(f"Served {path.name}, removal in {self.settings.download_cleanup_delay}s")
