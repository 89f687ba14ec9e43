"""Data models for the FastAPI service.

This package contains Pydantic models for request/response validation
and for the documents stored in MongoDB.
"""
