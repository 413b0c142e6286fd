import logging
import os
import time
import uuid
from typing import Tuple

import boto3
from botocore.exceptions import ClientError
from fastapi import HTTPException

from app.database import DEBUG, get_settings

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024

ALLOWED_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg", ".bmp",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".csv", ".txt",
    ".ppt", ".pptx", ".odt", ".ods", ".odp",
    ".json", ".xml", ".md", ".rtf",
    ".py", ".js", ".ts", ".jsx", ".tsx", ".html", ".css",
    ".zip", ".rar", ".7z", ".tar", ".gz",
    ".mp3", ".wav", ".mp4", ".mov", ".avi",
}

SAFE_MIME_TYPES = {
    ".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png",
    ".gif": "image/gif", ".webp": "image/webp", ".svg": "image/svg+xml",
    ".bmp": "image/bmp", ".pdf": "application/pdf",
    ".txt": "text/plain", ".csv": "text/csv", ".md": "text/plain",
    ".json": "application/json", ".xml": "application/xml",
}


def file_category(mime_type: str) -> str:
    mime_type = mime_type or ""
    if mime_type.startswith("image/"):
        return "image"
    if mime_type == "application/pdf":
        return "pdf"
    if any(kind in mime_type for kind in ("spreadsheet", "csv", "excel")):
        return "spreadsheet"
    if "document" in mime_type or "word" in mime_type:
        return "document"
    if any(kind in mime_type for kind in ("json", "javascript", "typescript", "text/")):
        return "code"
    return "other"


def check_extension(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"File type {ext or filename} is not allowed")
    return ext


def unique_name(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}{ext}"


class FileStorage:
    """Local disk in DEBUG, S3 otherwise."""

    def __init__(self, upload_dir: str | None = None, debug: bool | None = None):
        settings = get_settings()
        self.upload_dir = upload_dir or settings.UPLOAD_DIR
        self.debug = DEBUG if debug is None else debug
        self.bucket = settings.S3_BUCKET_NAME
        os.makedirs(self.upload_dir, exist_ok=True)
        if not self.debug:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION,
            )

    def save(self, content: bytes, filename: str, folder: str = "") -> Tuple[str, int]:
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="File is too large")
        stored = unique_name(filename)
        relative = f"{folder}/{stored}" if folder else stored
        if not self.debug:
            try:
                self.s3_client.put_object(Body=content, Bucket=self.bucket, Key=relative)
            except ClientError as e:
                logger.error("Error uploading %s to S3: %s", relative, e)
                raise HTTPException(status_code=500, detail="Failed to upload file to S3")
            return f"s3://{self.bucket}/{relative}", len(content)

        target_dir = os.path.join(self.upload_dir, folder) if folder else self.upload_dir
        os.makedirs(target_dir, exist_ok=True)
        with open(os.path.join(target_dir, stored), "wb") as file_object:
            file_object.write(content)
        return relative, len(content)

    def delete(self, path: str):
        if path.startswith("s3://"):
            key = path.split(f"s3://{self.bucket}/", 1)[-1]
            try:
                self.s3_client.delete_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                logger.error("Error deleting %s from S3: %s", key, e)
                raise HTTPException(status_code=500, detail="Failed to delete file from S3")
            return
        full_path = os.path.join(self.upload_dir, path)
        if os.path.exists(full_path):
            os.remove(full_path)


def get_file_storage() -> FileStorage:
    return FileStorage()
