"""
SDK Types and Data Classes
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List
from enum import Enum


class Operation(str, Enum):
    COMPRESS = "compress"
    CONVERT = "convert"


@dataclass
class FileFlexorConfig:
    base_url: str
    timeout: float = 30.0


@dataclass
class UploadedFile:
    id: str
    original_name: str
    size: int
    formatted_size: str
    type: str


@dataclass
class ProcessedResult:
    filename: str
    size: int
    formatted_size: str
    download_url: str


@dataclass
class ConversionOptions:
    type: str
    can_compress: bool
    target_formats: List[str]


@dataclass
class HealthStatus:
    status: str
    timestamp: Optional[datetime] = None
