import os
import pathlib
from typing import BinaryIO, Tuple

from google.cloud import storage


class StorageError(Exception):
    pass


class StorageClient:
    """Arquivos de anexos: Google Cloud Storage ou diretorio local (LOCAL_STORAGE=1)."""

    def __init__(self) -> None:
        self.bucket_name = os.getenv("GCS_BUCKET")
        self.use_local = os.getenv("LOCAL_STORAGE", "0") == "1" or not self.bucket_name
        self.base_dir = pathlib.Path(os.getenv("LOCAL_STORAGE_DIR", "storage")).resolve()
        if self.use_local:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        self._client = storage.Client() if self.bucket_name and not self.use_local else None

    def _ensure_bucket(self):
        if not self.bucket_name or not self._client:
            raise StorageError("GCS_BUCKET nao configurado.")
        return self._client.bucket(self.bucket_name)

    def upload_file(
        self,
        file_obj: BinaryIO,
        object_name: str,
        content_type: str,
        max_bytes: int | None = None,
    ) -> Tuple[str, int]:
        total = 0
        if self.use_local:
            full_path = self.base_dir / object_name
            full_path.parent.mkdir(parents=True, exist_ok=True)
            with open(full_path, "wb") as handle:
                while True:
                    chunk = file_obj.read(1024 * 1024)
                    if not chunk:
                        break
                    handle.write(chunk)
                    total += len(chunk)
                    if max_bytes and total > max_bytes:
                        handle.close()
                        full_path.unlink(missing_ok=True)
                        raise StorageError("Arquivo excede o tamanho maximo permitido.")
            return full_path.as_uri(), total

        bucket = self._ensure_bucket()
        blob = bucket.blob(object_name)
        with blob.open("wb") as handle:
            while True:
                chunk = file_obj.read(1024 * 1024)
                if not chunk:
                    break
                handle.write(chunk)
                total += len(chunk)
                if max_bytes and total > max_bytes:
                    raise StorageError("Arquivo excede o tamanho maximo permitido.")
        blob.content_type = content_type
        blob.patch()
        return f"gs://{self.bucket_name}/{object_name}", total

    def delete_object(self, object_name: str) -> None:
        if self.use_local:
            (self.base_dir / object_name).unlink(missing_ok=True)
            return
        bucket = self._ensure_bucket()
        bucket.blob(object_name).delete()
