"""Business logic layer for files app.

This package contains all business logic for file operations:
- Metadata-only file creation and lookup
- Content upload, download and deletion
- Keeping database rows and stored blobs consistent

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
