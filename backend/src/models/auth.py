"""
Authentication and user models.

Provides Pydantic schemas for:
- User documents stored in MongoDB
- Signup, login and password reset requests and responses
- JWT token payloads

Request schemas accept every field as optional so that presence checks
happen in the service layer and surface as a 400 with the API's own error
messages rather than as framework validation errors. Numbers and booleans
sent for text fields are stored as strings.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from backend.src.models.common import MongoDocument, TextField


# ============================================================================
# Database Models
# ============================================================================


class UserDB(MongoDocument):
    """
    User document as stored in the ``users`` collection.

    The ``password`` key holds the bcrypt hash, never the plaintext.
    """
    first_name: str = Field(
        ...,
        alias="firstName",
        description="First name"
    )
    last_name: str = Field(
        ...,
        alias="lastName",
        description="Last name"
    )
    email: str = Field(
        ...,
        description="Email address (unique)"
    )
    password_hash: str = Field(
        ...,
        alias="password",
        description="BCrypt password hash"
    )

    def __repr__(self) -> str:
        """String representation without the hash."""
        return f"<UserDB(id={self.id}, email='{self.email}')>"


# ============================================================================
# Pydantic Request Models
# ============================================================================


class SignupRequest(BaseModel):
    """Signup request schema."""
    first_name: TextField = Field(None, alias="firstName")
    last_name: TextField = Field(None, alias="lastName")
    email: TextField = None
    password: TextField = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "firstName": "Ada",
                "lastName": "Lovelace",
                "email": "ada@example.com",
                "password": "analytical-engine"
            }
        }
    )


class LoginRequest(BaseModel):
    """Login request schema."""
    email: TextField = None
    password: TextField = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "ada@example.com",
                "password": "analytical-engine"
            }
        }
    }


class ResetPasswordRequest(BaseModel):
    """Password reset request schema."""
    email: TextField = None


# ============================================================================
# Pydantic Response Models
# ============================================================================


class LoginResponse(BaseModel):
    """Successful login response."""
    message: str = Field(
        default="Login successful!",
        description="Outcome message"
    )
    token: str = Field(
        ...,
        min_length=10,
        description="JWT access token"
    )


class ResetPasswordResponse(BaseModel):
    """Password reset response; ``link`` is only set when exposure is enabled."""
    message: str = Field(
        default="Password reset email sent!",
        description="Outcome message"
    )
    link: Optional[str] = Field(
        None,
        description="Password reset link"
    )


# ============================================================================
# Token Models
# ============================================================================


class TokenPayload(BaseModel):
    """
    JWT token payload/claims.

    ``id`` is the user's ObjectId hex string.
    """
    id: str = Field(
        ...,
        description="User ID"
    )
    email: str = Field(
        ...,
        description="Email address"
    )
    exp: int = Field(
        ...,
        description="Expiration timestamp (Unix epoch)"
    )
    iat: Optional[int] = Field(
        None,
        description="Issued at timestamp (Unix epoch)"
    )
