"""
Baluplix - a small video hosting API.

Admins upload videos straight to object storage via presigned URLs,
record metadata and toggle publishing; visitors list published videos
and stream them through time-limited signed URLs.

- core: Framework-agnostic catalog workflow
- infrastructure: Snowflake and S3/R2 integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
