"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- snowflake: video metadata persistence
- storage: object storage (S3/R2) and presigned URLs

These wrappers translate between external formats and our domain models.
"""
