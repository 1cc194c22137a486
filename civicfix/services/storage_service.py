"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — S3-compatible object storage or local disk.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
Objects are publicly readable once stored; get_public_url() returns
the address clients use to fetch them.
"""

from pathlib import Path

from civicfix.config import settings

# 로컬 업로드 디렉토리 — .env의 LOCAL_UPLOADS_DIR 또는 <project>/uploads/
_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self, uploads_dir: Path = UPLOADS_DIR) -> None:
        self._client = None
        self.uploads_dir: Path = uploads_dir

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def _local_path(self, bucket: str, key: str) -> Path:
        path = (self.uploads_dir / bucket / key).resolve()
        root = (self.uploads_dir / bucket).resolve()
        if root not in path.parents:
            raise ValueError(f"Object key escapes bucket: {key!r}")
        return path

    def put_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str | None = None,
    ) -> None:
        """오브젝트를 저장합니다. 실패 시 예외를 그대로 전파합니다.

        Store an object. Any storage failure propagates to the caller
        (botocore ClientError, OSError, ...).
        """
        if self.is_local:
            path = self._local_path(bucket, key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            return

        params = {"Bucket": bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        self.client.put_object(**params)

    def get_public_url(self, bucket: str, key: str) -> str:
        """저장된 오브젝트의 공개 URL — Public URL of a stored object."""
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{bucket}/{key}"
        return f"https://{bucket}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"


storage_service: StorageService = StorageService()
