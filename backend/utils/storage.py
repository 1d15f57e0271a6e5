from fastapi import UploadFile
from config import get_supabase_storage, SUPABASE_STORAGE_BUCKET, MAX_IMAGE_SIZE_BYTES
from policy.errors import StoreError, ValidationFailed
import uuid
import os
import logging

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class BlobStore:
    async def put_blob(self, path: str, content: bytes, content_type: str) -> str:
        raise NotImplementedError


class SupabaseBlobStore(BlobStore):
    """Public-bucket blob storage in Supabase Storage"""

    def __init__(self, bucket_name: str = SUPABASE_STORAGE_BUCKET):
        self.bucket_name = bucket_name
        self._storage = None

    @property
    def storage(self):
        if self._storage is None:
            self._storage = get_supabase_storage()
        return self._storage

    async def put_blob(self, path: str, content: bytes, content_type: str) -> str:
        try:
            response = self.storage.from_(self.bucket_name).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type}
            )
            if hasattr(response, 'error') and response.error:
                logger.error(f"Upload error: {response.error}")
                raise StoreError("Failed to upload image")

            public_url = self.storage.from_(self.bucket_name).get_public_url(path)
            logger.info(f"Uploaded {path} to {self.bucket_name}")
            return public_url

        except StoreError:
            raise
        except Exception as upload_error:
            logger.error(f"Upload error: {str(upload_error)}")
            raise StoreError("Failed to upload image") from upload_error


async def upload_image(blob_store: BlobStore, folder: str, owner_id: str, file: UploadFile) -> str:
    """
    Validate an uploaded image and store it under folder/owner_id, returning the public URL
    """
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailed(f"File type {file.content_type} not allowed")

    file_content = await file.read()
    if len(file_content) > MAX_IMAGE_SIZE_BYTES:
        raise ValidationFailed("File size must be less than 5MB")

    file_extension = os.path.splitext(file.filename)[1] if file.filename else '.jpg'
    unique_filename = f"{folder}/{owner_id}/{uuid.uuid4()}{file_extension}"

    return await blob_store.put_blob(unique_filename, file_content, file.content_type)


supabase_blob_store = SupabaseBlobStore()
