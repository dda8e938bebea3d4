from pydantic_settings import BaseSettings
from dataclasses import dataclass
from pathlib import Path
from typing import List
import os

class Settings(BaseSettings):
    # Application settings
    app_name: str = "FileFlexor"
    environment: str = os.getenv("PYTHON_ENV", "development")
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", "3001"))
    log_level: str = "INFO"
    
    # Storage settings
    upload_dir: str = "uploads"
    processed_dir: str = "processed"
    static_dir: str = "dist"
    
    # Upload settings
    max_upload_size: int = 50 * 1024 * 1024  # 50MB
    
    # Processing settings
    default_quality: int = 80
    min_quality: int = 20
    max_quality: int = 100
    
    # Cleanup settings (seconds)
    input_cleanup_delay: float = 1.0
    download_cleanup_delay: float = 5.0
    cleanup_sweep_interval: float = 1.0
    orphan_max_age: float = 3600.0
    
    # Security settings
    allowed_origins: str = "*"  # comma separated

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@dataclass(frozen=True)
class StoragePaths:
    """Intake and results directories shared by the request handlers"""
    upload_dir: Path
    processed_dir: Path
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "StoragePaths":
        paths = cls(
            upload_dir=Path(settings.upload_dir).resolve(),
            processed_dir=Path(settings.processed_dir).resolve()
        )
        paths.ensure()
        return paths
    
    def ensure(self) -> None:
        """Create both directories if they are missing"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.processed_dir.mkdir(parents=True, exist_ok=True)
    
    @property
    def all(self) -> List[Path]:
        return [self.upload_dir, self.processed_dir]
