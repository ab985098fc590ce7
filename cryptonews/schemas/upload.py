from typing import List, Optional

from cryptonews.schemas.common import CamelModel

class StoredFileOut(CamelModel):
    file_name: str
    original_name: Optional[str] = None
    size: int
    mime_type: Optional[str] = None
    url: str

class UploadResponse(CamelModel):
    success: bool = True
    message: str = "File uploaded successfully"
    data: StoredFileOut

class FileListResponse(CamelModel):
    success: bool = True
    count: int
    data: List[StoredFileOut]
