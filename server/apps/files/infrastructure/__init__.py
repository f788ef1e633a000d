"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob storage backends (local filesystem, S3/MinIO/R2)
- Backend selection from settings
- Metadata extraction (MIME sniffing, storage keys)

Keep infrastructure concerns separate from business logic.
"""
