"""
MinIO implementations of the shop repository protocols.
"""

from .client import MinioClient, create_minio_client
from .order import MinioOrderRepository
from .user import MinioUserRepository

__all__ = [
    "MinioClient",
    "MinioOrderRepository",
    "MinioUserRepository",
    "create_minio_client",
]
