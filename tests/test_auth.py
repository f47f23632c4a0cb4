import httpx
import pytest

from photoviewer.api.client import BackendClient
from photoviewer.errors import LoginError
from photoviewer.session.auth import AuthFlow


def make_flow(config, store, state, handler) -> AuthFlow:
    client = BackendClient(config, transport=httpx.MockTransport(handler))
    return AuthFlow(client, store, state)


def ok(request):
    return httpx.Response(200, json={"token": "abc"})


@pytest.mark.asyncio
async def test_successful_login_persists_and_activates(config, store, state):
    flow = make_flow(config, store, state, ok)

    token = await flow.login(" alice ", "pw", remember_username=True)
    await flow.client.close()

    assert token == "abc"
    assert store.get_token() == "abc"
    assert store.get_username() == "alice"
    assert state.is_active
    assert flow.is_logged_in()


@pytest.mark.asyncio
async def test_login_without_remember_forgets_username(config, store, state):
    store.save_username("bob")
    flow = make_flow(config, store, state, ok)

    await flow.login("alice", "pw", remember_username=False)
    await flow.client.close()

    assert store.get_username() == ""


@pytest.mark.asyncio
async def test_failed_login_leaves_store_untouched(config, store, state, store_path):
    store.save_username("bob")
    before = store_path.read_bytes()
    flow = make_flow(
        config, store, state, lambda r: httpx.Response(400, json={"error": "Invalid credentials"})
    )

    with pytest.raises(LoginError, match="Invalid credentials"):
        await flow.login("alice", "wrong", remember_username=True)
    await flow.client.close()

    assert store_path.read_bytes() == before
    assert not state.is_active


@pytest.mark.asyncio
@pytest.mark.parametrize("username, password", [("", "pw"), ("alice", "  "), ("   ", "")])
async def test_blank_credentials_rejected_before_network(config, store, state, username, password):
    def handler(request):
        raise AssertionError("no request expected")

    flow = make_flow(config, store, state, handler)
    with pytest.raises(LoginError, match="Username and password required"):
        await flow.login(username, password)
    await flow.client.close()


@pytest.mark.asyncio
async def test_logout_wipes_store(config, store, state):
    flow = make_flow(config, store, state, ok)
    await flow.login("alice", "pw", remember_username=True)
    await flow.client.close()

    flow.logout()

    assert not flow.is_logged_in()
    assert store.get_username() == ""
