"""Request/response models for the PhotoViewer backend."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    """Body of POST /api/auth/login/."""
    username: str
    password: str


class LoginResponse(BaseModel):
    token: Optional[str] = None
    error: Optional[str] = None


POST_DEFAULTS = {"id": -1, "title": "No title", "text": ""}


class Post(BaseModel):
    """A feed item from /api_root/Post/."""
    id: int = -1
    title: str = "No title"
    text: str = ""
    image: Optional[str] = Field(default=None, description="Absolute image URL")
    image_bytes: Optional[bytes] = Field(default=None, exclude=True)

    @field_validator("id", "title", "text", mode="before")
    @classmethod
    def _null_to_default(cls, value, info):
        if value is None:
            return POST_DEFAULTS[info.field_name]
        return value

    @property
    def has_image(self) -> bool:
        return bool(self.image) and self.image != "null"
