"""
Core business logic for the video catalog.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or boto3. Storage and persistence are reached through the protocols in
catalog.interfaces, so the workflow can be tested with in-memory doubles.
"""
