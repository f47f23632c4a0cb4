"""HTTP client for communicating with the PhotoViewer backend."""

import mimetypes
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import ClientConfig
from ..errors import ApiError, LoginError
from ..logging import get_logger
from .models import LoginRequest, LoginResponse, Post

logger = get_logger("api")

LOGIN_ENDPOINT = "/api/auth/login/"
POSTS_ENDPOINT = "/api_root/Post/"

DEFAULT_LOGIN_ERROR = "Login failed"


def _image_part(image_path: Path) -> tuple[str, bytes, str]:
    """Multipart file tuple with a content type guessed from the file name."""
    image_path = Path(image_path)
    content_type = mimetypes.guess_type(image_path.name)[0] or "image/jpeg"
    return image_path.name, image_path.read_bytes(), content_type


class BackendClient:
    """Async HTTP client for the auth and post endpoints."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.base_url = config.api_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=config.request_timeout, transport=transport)

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # --- Auth ---

    async def login(self, username: str, password: str) -> str:
        """Exchange credentials for a token. Raises LoginError with a user-facing message."""
        body = LoginRequest(username=username, password=password)
        try:
            resp = await self._client.post(
                f"{self.base_url}{LOGIN_ENDPOINT}",
                json=body.model_dump(),
            )
        except httpx.HTTPError as e:
            logger.warning(f"Login request failed: {e}")
            raise LoginError(f"Network error: {e}") from e

        if resp.status_code != httpx.codes.OK:
            message = DEFAULT_LOGIN_ERROR
            try:
                message = LoginResponse.model_validate(resp.json()).error or message
            except (ValueError, ValidationError):
                pass  # non-JSON error body, keep the default message
            logger.info(f"Login rejected (HTTP {resp.status_code}): {message}")
            raise LoginError(message)

        try:
            token = LoginResponse.model_validate(resp.json()).token
        except (ValueError, ValidationError) as e:
            raise LoginError(DEFAULT_LOGIN_ERROR) from e
        if not token:
            raise LoginError(DEFAULT_LOGIN_ERROR)

        logger.info(f"Logged in as {username}")
        return token

    # --- Posts ---

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Token {token}"}

    async def _request(self, method: str, url: str, token: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(
                method, url, headers=self._auth_headers(token), **kwargs
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

    async def list_posts(self, token: str) -> list[Post]:
        """Fetch post metadata (without image content)."""
        resp = await self._request("GET", f"{self.base_url}{POSTS_ENDPOINT}", token)
        if resp.status_code != httpx.codes.OK:
            raise ApiError(f"Sync failed (HTTP {resp.status_code})", resp.status_code)
        try:
            posts = [Post.model_validate(item) for item in resp.json()]
        except (ValueError, TypeError, ValidationError) as e:
            raise ApiError(f"Malformed post list: {e}") from e
        logger.debug(f"Total posts received: {len(posts)}")
        return posts

    async def fetch_image(self, url: str) -> Optional[bytes]:
        """Download an image. Returns None on any failure."""
        try:
            resp = await self._client.get(url, timeout=5.0)
        except httpx.HTTPError as e:
            logger.warning(f"Image download error for {url}: {e}")
            return None
        if resp.status_code != httpx.codes.OK or not resp.content:
            logger.warning(f"Image download failed for {url} - HTTP {resp.status_code}")
            return None
        return resp.content

    async def load_feed(self, token: str) -> list[Post]:
        """List posts and download their images; posts without a usable image are skipped."""
        feed = []
        for index, post in enumerate(await self.list_posts(token), start=1):
            if not post.has_image:
                logger.warning(f"Post #{index} has no image")
                continue
            content = await self.fetch_image(post.image)
            if content is None:
                continue
            feed.append(post.model_copy(update={"image_bytes": content}))
        logger.info(f"Feed loaded: {len(feed)} posts")
        return feed

    async def create_post(self, token: str, title: str, text: str, image_path: Path) -> dict:
        """Upload a new post as multipart form data."""
        resp = await self._request(
            "POST",
            f"{self.base_url}{POSTS_ENDPOINT}",
            token,
            data={"title": title, "text": text},
            files={"image": _image_part(image_path)},
        )
        if resp.status_code not in (httpx.codes.OK, httpx.codes.CREATED):
            logger.error(f"Upload failed: {resp.status_code} - {resp.text}")
            raise ApiError(f"Upload failed (HTTP {resp.status_code})", resp.status_code)
        logger.info(f"Uploaded post '{title}'")
        try:
            return resp.json()
        except ValueError:
            return {}

    async def update_post(
        self,
        token: str,
        post_id: int,
        title: str,
        text: str,
        image_path: Optional[Path] = None,
    ) -> None:
        """Replace a post's title/text and optionally its image."""
        files = None
        if image_path is not None:
            files = {"image": _image_part(image_path)}
        resp = await self._request(
            "PUT",
            f"{self.base_url}{POSTS_ENDPOINT}{post_id}/",
            token,
            data={"title": title, "text": text},
            files=files,
        )
        if not 200 <= resp.status_code < 205:
            logger.error(f"Update failed with code: {resp.status_code}")
            raise ApiError(f"Update failed (HTTP {resp.status_code})", resp.status_code)
        logger.info(f"Updated post {post_id}")

    async def delete_post(self, token: str, post_id: int) -> None:
        resp = await self._request("DELETE", f"{self.base_url}{POSTS_ENDPOINT}{post_id}/", token)
        if resp.status_code not in (httpx.codes.OK, httpx.codes.NO_CONTENT):
            logger.error(f"Delete failed with code: {resp.status_code}")
            raise ApiError(f"Delete failed (HTTP {resp.status_code})", resp.status_code)
        logger.info(f"Deleted post {post_id}")
