"""
MinioClient protocol definition and shared JSON object helpers.

The repositories depend on the ``MinioClient`` protocol rather than on
``minio.Minio`` directly, so tests can hand them an in-memory fake. Only the
methods the repositories actually call are listed.
"""

import io
import logging
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    runtime_checkable,
)

from minio import Minio
from minio.error import S3Error
from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class MinioClient(Protocol):
    """
    Protocol defining the MinIO client interface used by the repositories.
    Both ``minio.Minio`` and the test fake satisfy it.
    """

    def bucket_exists(self, bucket_name: str) -> bool: ...

    def make_bucket(self, bucket_name: str) -> None: ...

    def put_object(
        self,
        bucket_name: str,
        object_name: str,
        data: Any,
        length: int,
        content_type: str = "application/octet-stream",
        metadata: Optional[Dict[str, str]] = None,
    ) -> Any: ...

    def get_object(self, bucket_name: str, object_name: str) -> Any:
        """Retrieve an object.

        Raises:
            S3Error: With code ``NoSuchKey`` when the object is missing
        """
        ...

    def remove_object(self, bucket_name: str, object_name: str) -> None: ...

    def list_objects(
        self,
        bucket_name: str,
        prefix: Optional[str] = None,
        recursive: bool = False,
    ) -> Iterator[Any]: ...


def create_minio_client(
    endpoint: str,
    access_key: str = "minioadmin",
    secret_key: str = "minioadmin",
    secure: bool = False,
) -> Minio:
    return Minio(
        endpoint,
        access_key=access_key,
        secret_key=secret_key,
        secure=secure,
    )


def is_no_such_key(error: S3Error) -> bool:
    return getattr(error, "code", None) == "NoSuchKey"


class MinioRepositoryMixin:
    """
    JSON object I/O on top of a ``MinioClient``.

    Missing objects read as ``None``. Every other S3 error is logged and
    re-raised so storage outages reach the caller.
    """

    client: MinioClient
    logger: logging.Logger

    def ensure_buckets_exist(self, bucket_names: Iterable[str]) -> None:
        for bucket_name in bucket_names:
            try:
                if not self.client.bucket_exists(bucket_name):
                    self.logger.info(
                        "Creating bucket",
                        extra={"bucket_name": bucket_name},
                    )
                    self.client.make_bucket(bucket_name)
                else:
                    self.logger.debug(
                        "Bucket already exists",
                        extra={"bucket_name": bucket_name},
                    )
            except S3Error as e:
                self.logger.error(
                    "Failed to create bucket",
                    extra={"bucket_name": bucket_name, "error": str(e)},
                )
                raise

    def get_bytes(
        self, bucket_name: str, object_name: str
    ) -> Optional[bytes]:
        try:
            response = self.client.get_object(
                bucket_name=bucket_name, object_name=object_name
            )
        except S3Error as e:
            if is_no_such_key(e):
                self.logger.debug(
                    "Object not found",
                    extra={
                        "bucket_name": bucket_name,
                        "object_name": object_name,
                    },
                )
                return None
            self.logger.error(
                "Error retrieving object",
                extra={
                    "bucket_name": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise
        try:
            return response.read()  # type: ignore[no-any-return]
        finally:
            response.close()
            response.release_conn()

    def put_bytes(
        self,
        bucket_name: str,
        object_name: str,
        data: bytes,
        content_type: str = "application/json",
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        try:
            self.client.put_object(
                bucket_name=bucket_name,
                object_name=object_name,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
                metadata=metadata,
            )
        except S3Error as e:
            self.logger.error(
                "Failed to store object",
                extra={
                    "bucket_name": bucket_name,
                    "object_name": object_name,
                    "error": str(e),
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            raise

    def get_json_object(
        self, bucket_name: str, object_name: str, model_class: Type[M]
    ) -> Optional[M]:
        data = self.get_bytes(bucket_name, object_name)
        if data is None:
            return None
        return model_class.model_validate_json(data)

    def put_json_object(
        self,
        bucket_name: str,
        object_name: str,
        model: BaseModel,
        metadata: Optional[Dict[str, str]] = None,
    ) -> None:
        self.put_bytes(
            bucket_name,
            object_name,
            model.model_dump_json().encode("utf-8"),
            metadata=metadata,
        )

    def remove(self, bucket_name: str, object_name: str) -> None:
        self.client.remove_object(
            bucket_name=bucket_name, object_name=object_name
        )

    def list_object_names(self, bucket_name: str) -> List[str]:
        return [
            obj.object_name
            for obj in self.client.list_objects(
                bucket_name=bucket_name, recursive=True
            )
        ]

    def list_json_objects(
        self, bucket_name: str, model_class: Type[M]
    ) -> List[M]:
        models = []
        for object_name in self.list_object_names(bucket_name):
            model = self.get_json_object(bucket_name, object_name, model_class)
            if model is not None:
                models.append(model)
        return models
