"""
Interactive console front end.

Each screen (login, feed) is a foreground surface reported to the
ForegroundTracker. Switching screens starts the new one before stopping the
old one, so the foreground count only reaches zero when the user sends the
app to the background.
"""

import asyncio
import getpass
import shlex
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Optional

from .api.models import Post
from .app import Application, Screen
from .errors import ApiError, LoginError
from .logging import get_logger

logger = get_logger("shell")

FEED_HELP = """Commands:
  refresh                                   reload the feed
  upload <image> <title> <text>             publish a new post
  edit <id> <title> <text> [--image PATH]   change a post
  delete <id>                               remove a post
  logout                                    forget the session
  background                                leave the app running in the background
  quit                                      exit"""

LOGIN_HELP = """Commands:
  login        sign in
  background   leave the app running in the background
  quit         exit"""


class Shell:
    """Drives screens and reports their lifecycle to the tracker."""

    def __init__(
        self,
        app: Application,
        input_func: Callable[[str], str] = input,
        password_func: Callable[[str], str] = getpass.getpass,
        output: Callable[[str], None] = print,
    ):
        self.app = app
        self._input = input_func
        self._password = password_func
        self._out = output
        self.current: Optional[Screen] = None
        self.posts: list[Post] = []

    async def _ask(self, prompt: str, reader: Optional[Callable[[str], str]] = None) -> str:
        """Read one line on a daemon thread.

        A pending input() never holds up shutdown: on Ctrl-C the awaiting task
        is cancelled and the reader thread dies with the process.
        """
        reader = reader or self._input
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def deliver(line: Optional[str], error: Optional[BaseException]) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(line)

        def read() -> None:
            line, error = None, None
            try:
                line = reader(prompt)
            except (EOFError, StopIteration):
                error = EOFError()
            except Exception as e:
                error = e
            try:
                loop.call_soon_threadsafe(deliver, line, error)
            except RuntimeError:
                pass  # loop already closed during shutdown

        threading.Thread(target=read, name="shell-input", daemon=True).start()
        return await future

    def show(self, screen: Screen) -> None:
        """Start `screen`, then stop whichever screen it replaces."""
        previous = self.current
        self.app.tracker.surface_started(screen.value)
        self.current = screen
        if previous is not None:
            self.app.tracker.surface_stopped(previous.value)

    def hide(self) -> None:
        if self.current is not None:
            self.app.tracker.surface_stopped(self.current.value)
            self.current = None

    async def run(self) -> None:
        self.show(self.app.launch())
        while self.current is not None:
            if self.current is Screen.LOGIN:
                await self._login_screen()
            else:
                await self._feed_screen()

    async def _background(self) -> None:
        self.hide()
        await self._ask("(in background - press Enter to return) ")
        self.show(self.app.launch())

    def _quit(self) -> None:
        self.hide()

    # --- Login screen ---

    async def _login_screen(self) -> None:
        command = (await self._ask("login> ")).strip().lower()
        if command in ("", "login"):
            await self._attempt_login()
        elif command == "background":
            await self._background()
        elif command == "quit":
            self._quit()
        else:
            self._out(LOGIN_HELP)

    async def _attempt_login(self) -> None:
        remembered = self.app.store.get_username()
        prompt = f"Username [{remembered}]: " if remembered else "Username: "
        username = (await self._ask(prompt)).strip() or remembered
        password = await self._ask("Password: ", self._password)
        default_remember = "Y/n" if remembered else "y/N"
        answer = (await self._ask(f"Remember username? [{default_remember}] ")).strip().lower()
        remember = answer.startswith("y") if answer else bool(remembered)

        try:
            await self.app.auth.login(username, password, remember_username=remember)
        except LoginError as e:
            self._out(e.message)
            return
        self.show(Screen.FEED)
        await self._refresh()

    # --- Feed screen ---

    def _token(self) -> Optional[str]:
        token = self.app.store.get_token()
        if token is None:
            self.show(Screen.LOGIN)
        return token

    async def _refresh(self) -> None:
        token = self._token()
        if token is None:
            return
        self._out("Syncing images...")
        try:
            self.posts = await self.app.client.load_feed(token)
        except ApiError as e:
            self._out(e.message)
            return
        if not self.posts:
            self._out("No posts to show")
        for post in self.posts:
            self._out(f"#{post.id}  {post.title}  ({len(post.image_bytes or b'')} bytes)")
            if post.text:
                self._out(f"      {post.text}")
        self._out(f"Sync complete ({len(self.posts)} posts)")

    async def _feed_screen(self) -> None:
        try:
            args = shlex.split(await self._ask("feed> "))
        except ValueError as e:
            self._out(f"Could not parse command: {e}")
            return
        if not args:
            return
        command, rest = args[0].lower(), args[1:]

        if command == "quit":
            self._quit()
        elif command == "background":
            await self._background()
        elif command == "logout":
            self.app.auth.logout()
            self.show(Screen.LOGIN)
        elif command == "refresh":
            await self._refresh()
        elif command in ("upload", "edit", "delete"):
            token = self._token()
            if token is not None:
                await self._mutate(command, rest, token)
        else:
            self._out(FEED_HELP)

    def _post_fields(self, title: str, text: str) -> Optional[tuple[str, str]]:
        """Trimmed title/text, or None (after telling the user) when either is blank."""
        title, text = title.strip(), text.strip()
        if not title:
            self._out("Title required")
            return None
        if not text:
            self._out("Text required")
            return None
        return title, text

    async def _mutate(self, command: str, args: list[str], token: str) -> None:
        client = self.app.client
        try:
            if command == "upload" and len(args) >= 2:
                fields = self._post_fields(args[1], " ".join(args[2:]))
                if fields is None:
                    return
                await client.create_post(token, *fields, Path(args[0]))
                self._out("Upload successful")
            elif command == "edit" and len(args) >= 2:
                image = None
                if "--image" in args:
                    idx = args.index("--image")
                    image = Path(args[idx + 1]) if idx + 1 < len(args) else None
                    args = args[:idx] + args[idx + 2:]
                post_id = int(args[0])
                fields = self._post_fields(args[1] if len(args) > 1 else "", " ".join(args[2:]))
                if fields is None:
                    return
                await client.update_post(token, post_id, *fields, image)
                self._out("Post updated")
            elif command == "delete" and len(args) == 1:
                await client.delete_post(token, int(args[0]))
                self._out("Post deleted")
            else:
                self._out(FEED_HELP)
                return
        except ApiError as e:
            self._out(e.message)
            return
        except (ValueError, OSError) as e:
            self._out(f"Invalid input: {e}")
            return
        await self._refresh()
