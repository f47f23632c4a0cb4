"""Backend REST API client."""

from .client import BackendClient
from .models import Post

__all__ = ['BackendClient', 'Post']
