"""FastAPI backend for the Vaacay travel planner.

This package provides REST API endpoints for account signup, login and
password reset, and for managing trips and notifications stored in MongoDB.
"""

__version__ = "1.0.0"
