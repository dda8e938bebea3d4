from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum

class Operation(str, Enum):
    COMPRESS = "compress"
    CONVERT = "convert"

class ProcessRequest(BaseModel):
    # Presence of file_id and operation is checked by the dispatcher so that a
    # missing value surfaces as MissingParameter rather than a schema error
    file_id: Optional[str] = Field(default=None, alias="fileId")
    operation: Optional[str] = None
    target_format: Optional[str] = Field(default=None, alias="targetFormat")
    quality: Optional[int] = None
    
    class Config:
        populate_by_name = True

class UploadedFile(BaseModel):
    id: str
    original_name: str = Field(alias="originalName")
    size: int
    formatted_size: str = Field(alias="formattedSize")
    type: str
    
    class Config:
        populate_by_name = True

class ProcessedResult(BaseModel):
    filename: str
    size: int
    formatted_size: str = Field(alias="formattedSize")
    download_url: str = Field(alias="downloadUrl")
    
    class Config:
        populate_by_name = True

class UploadResponse(BaseModel):
    success: bool = True
    file: UploadedFile

class ProcessResponse(BaseModel):
    success: bool = True
    result: ProcessedResult

class ConversionOptions(BaseModel):
    success: bool = True
    type: str
    can_compress: bool = Field(alias="canCompress")
    target_formats: List[str] = Field(default_factory=list, alias="targetFormats")
    
    class Config:
        populate_by_name = True

class HealthResponse(BaseModel):
    status: str = "OK"
    timestamp: str
