import asyncio
import threading

import httpx
import pytest

from photoviewer.app import Application, Screen
from photoviewer.session.state import SessionState
from photoviewer.shell import Shell


def backend(request):
    if request.url.path == "/api/auth/login/":
        body = request.read()
        if b"wrong" in body:
            return httpx.Response(400, json={"error": "Invalid credentials"})
        return httpx.Response(200, json={"token": "abc"})
    if request.url.path == "/api_root/Post/":
        return httpx.Response(
            200, json=[{"id": 3, "title": "Beach", "text": "", "image": "http://img/3.jpg"}]
        )
    if request.url.path == "/3.jpg":
        return httpx.Response(200, content=b"jpeg")
    return httpx.Response(404)


@pytest.fixture
def app(config, keyring_backend, clock):
    return Application.create(
        config,
        keyring_backend=keyring_backend,
        state=SessionState(),
        clock=clock,
        transport=httpx.MockTransport(backend),
    )


def scripted(lines):
    feed = iter(lines)
    return lambda prompt: next(feed)


@pytest.mark.asyncio
async def test_login_then_feed_then_quit(app):
    output = []
    shell = Shell(
        app,
        input_func=scripted(["login", "alice", "y", "quit"]),
        password_func=lambda prompt: "pw",
        output=output.append,
    )

    await shell.run()
    await app.close()

    assert "#3  Beach  (4 bytes)" in output
    assert "Sync complete (1 posts)" in output
    assert app.store.get_username() == "alice"
    assert app.tracker.active_count == 0
    # Quitting stops the last surface, which records the last-active time
    assert app.store.snapshot().has_last_active_time


@pytest.mark.asyncio
async def test_failed_login_stays_on_login_screen(app):
    output = []
    passwords = iter(["wrong", "pw"])
    shell = Shell(
        app,
        input_func=scripted(["login", "alice", "n", "login", "alice", "n", "logout", "quit"]),
        password_func=lambda prompt: next(passwords),
        output=output.append,
    )

    await shell.run()
    await app.close()

    assert "Invalid credentials" in output
    assert shell.current is None
    assert not app.store.has_token()


@pytest.mark.asyncio
async def test_background_and_resume_revalidates(app, clock):
    app.store.save_token("abc")
    app.state.set_active(True)
    app.store.set_last_active_time(clock.now)

    def advance_then_return(prompt):
        clock.advance(11 * 60_000)
        return ""

    inputs = iter(["background", None, "quit"])

    def input_func(prompt):
        value = next(inputs)
        return advance_then_return(prompt) if value is None else value

    shell = Shell(app, input_func=input_func, password_func=lambda p: "", output=lambda s: None)
    await shell.run()
    await app.close()

    assert app.last_decision.reason.value == "inactivity_timeout"
    assert not app.store.has_token()


def test_show_starts_new_screen_before_stopping_old(app, clock):
    shell = Shell(app, output=lambda s: None)
    shell.show(Screen.LOGIN)
    shell.show(Screen.FEED)

    # Count never hit zero during the switch
    assert not app.store.snapshot().has_last_active_time
    assert app.tracker.active_count == 1


class RecordingBackend:
    """Wraps the fake backend and remembers every post mutation it receives."""

    def __init__(self):
        self.mutations = []

    def __call__(self, request):
        if request.method in ("POST", "PUT") and request.url.path.startswith("/api_root/Post/"):
            self.mutations.append((request.method, request.url.path, request.read()))
            return httpx.Response(201, json={"id": 9})
        return backend(request)


@pytest.fixture
def recording_app(config, keyring_backend, clock):
    recorder = RecordingBackend()
    app = Application.create(
        config,
        keyring_backend=keyring_backend,
        state=SessionState(),
        clock=clock,
        transport=httpx.MockTransport(recorder),
    )
    return app, recorder


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "command, message",
    [
        ('edit 5 "" ""', "Title required"),
        ('edit 5 "   " body', "Title required"),
        ('edit 5 Title "  "', "Text required"),
        ("edit 5 Title", "Text required"),
        ('upload img.jpg "" body', "Title required"),
        ("upload img.jpg Title", "Text required"),
    ],
)
async def test_blank_title_or_text_sends_nothing(recording_app, command, message):
    app, recorder = recording_app
    output = []
    shell = Shell(
        app,
        input_func=scripted(["login", "alice", "n", command, "quit"]),
        password_func=lambda prompt: "pw",
        output=output.append,
    )

    await shell.run()
    await app.close()

    assert message in output
    assert recorder.mutations == []


@pytest.mark.asyncio
async def test_edit_trims_title_and_text(recording_app):
    app, recorder = recording_app
    output = []
    shell = Shell(
        app,
        input_func=scripted(["login", "alice", "n", 'edit 5 "  New  " " body "', "quit"]),
        password_func=lambda prompt: "pw",
        output=output.append,
    )

    await shell.run()
    await app.close()

    assert recorder.mutations == [("PUT", "/api_root/Post/5/", b"title=New&text=body")]
    assert "Post updated" in output


@pytest.mark.asyncio
async def test_cancel_does_not_wait_for_pending_input(app):
    waiting = threading.Event()
    release = threading.Event()

    def blocking_input(prompt):
        waiting.set()
        release.wait(5)
        return "quit"

    shell = Shell(app, input_func=blocking_input, output=lambda s: None)
    task = asyncio.create_task(shell.run())
    try:
        while not waiting.is_set():
            await asyncio.sleep(0.01)

        readers = [t for t in threading.enumerate() if t.name == "shell-input"]
        assert readers and all(t.daemon for t in readers)

        task.cancel()
        done, _ = await asyncio.wait({task}, timeout=1)
        assert task in done
        assert task.cancelled()
    finally:
        release.set()
        await app.close()
