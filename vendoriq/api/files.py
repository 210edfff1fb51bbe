# vendoriq/api/files.py
import os

from fastapi import APIRouter, Depends, File as FileParam, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from vendoriq.core.security import get_current_user
from vendoriq.db.session import get_db
from vendoriq.models.file import File
from vendoriq.models.user import User
from vendoriq.services.file_service import file_service

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/upload")
async def upload_file(
    file: UploadFile = FileParam(...),
    type: str = Form("document"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    details = await file_service.validate_upload(file, type)
    stored = file_service.save(file, current_user.id, details["file_extension"])

    record = File(
        user_id=current_user.id,
        original_name=file.filename,
        file_name=stored["file_name"],
        file_path=stored["file_path"],
        file_size=details["file_size"],
        mime_type=file.content_type,
        file_type=type,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    return {
        "success": True,
        "message": "File uploaded successfully",
        "data": {
            "id": record.id,
            "url": f"/api/v1/files/{record.id}",
            "original_name": record.original_name,
            "file_size": record.file_size,
        },
    }


@router.get("/{file_id}")
def get_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = db.query(File).filter(File.id == file_id).first()
    if not record:
        raise HTTPException(status_code=404, detail="File not found")

    if record.user_id != current_user.id and not record.is_public:
        raise HTTPException(status_code=403, detail="Access denied")

    if not os.path.exists(record.file_path):
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(record.file_path, media_type=record.mime_type, filename=record.original_name)
