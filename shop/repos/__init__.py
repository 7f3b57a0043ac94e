"""
Concrete implementations of the protocols in ``shop.repositories``.

- ``memory``: dictionary-backed repositories and an in-process publisher
- ``minio``: repositories persisting JSON objects in MinIO buckets
- ``log``: a publisher that writes events to the application log
"""
