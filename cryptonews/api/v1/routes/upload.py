from typing import Any, Optional

from fastapi import APIRouter, Depends, File, UploadFile

from cryptonews.api.v1 import dependencies
from cryptonews.core.exceptions import BadRequestError
from cryptonews.schemas.common import MessageResponse
from cryptonews.schemas.upload import FileListResponse, UploadResponse
from cryptonews.services.upload import UploadService

router = APIRouter(dependencies=[Depends(dependencies.require_admin)])

@router.post("", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    uploads: UploadService = Depends(dependencies.get_upload_service),
) -> Any:
    """
    Upload an image (max 5MB) and get back its public URL.
    """
    if file is None:
        raise BadRequestError("No files were uploaded")
    return {"data": await uploads.save(file)}

@router.get("/files", response_model=FileListResponse)
async def list_files(
    uploads: UploadService = Depends(dependencies.get_upload_service),
) -> Any:
    files = uploads.list_files()
    return {"count": len(files), "data": files}

@router.delete("/{filename}", response_model=MessageResponse)
async def delete_file(
    filename: str,
    uploads: UploadService = Depends(dependencies.get_upload_service),
) -> Any:
    uploads.delete(filename)
    return {"message": "File deleted successfully"}
