# vendoriq/services/file_service.py
import logging
import os
import shutil
import uuid
from typing import Dict

from fastapi import HTTPException, UploadFile

from vendoriq.core.config import settings

logger = logging.getLogger(__name__)


class FileService:
    def __init__(self, upload_dir: str = None, max_file_size: int = None):
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.max_file_size = max_file_size or settings.MAX_UPLOAD_SIZE
        self.allowed_types = {
            "image": {"image/jpeg", "image/png", "image/jpg", "image/gif", "image/svg+xml"},
            "document": {
                "application/pdf",
                "application/msword",
                "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            },
        }

    async def validate_upload(self, file: UploadFile, file_type: str) -> Dict:
        """Check type and size of an upload before it is stored"""
        allowed = self.allowed_types.get(file_type)
        if not allowed or file.content_type not in allowed:
            raise HTTPException(status_code=400, detail="Invalid file type")

        contents = await file.read()
        file_size = len(contents)
        await file.seek(0)

        if file_size == 0:
            raise HTTPException(status_code=400, detail="No file uploaded")
        if file_size > self.max_file_size:
            raise HTTPException(
                status_code=400,
                detail=f"File size exceeds {self.max_file_size // (1024 * 1024)}MB limit",
            )

        return {"file_size": file_size, "file_extension": os.path.splitext(file.filename or "")[1].lower()}

    def save(self, file: UploadFile, user_id: str, extension: str) -> Dict:
        directory = os.path.join(self.upload_dir, user_id)
        os.makedirs(directory, exist_ok=True)
        file_name = f"{uuid.uuid4().hex}{extension}"
        file_path = os.path.join(directory, file_name)

        with open(file_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)

        logger.info(f"📁 Stored upload {file.filename} as {file_path}")
        return {"file_name": file_name, "file_path": file_path}


file_service = FileService()
