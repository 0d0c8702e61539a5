"""
Unit tests for the Azure AD token provider.

Tests cover:
- Silent acquisition with MSAL mocked out
- Unauthenticated results for every failure path
- Token cache load/save around each acquisition
- Configuration validation
"""

from unittest.mock import MagicMock, patch

import pytest

from copilot_relay.auth.exceptions import TokenCacheError
from copilot_relay.auth.providers import AzureADTokenProvider, create_token_provider
from copilot_relay.auth.schemas import POWER_PLATFORM_SCOPE, AccessToken, Unauthenticated
from copilot_relay.auth.token_cache import FileTokenCacheStore, ITokenCacheStore
from copilot_relay.domain.exceptions import ConfigurationError
from copilot_relay.domain.models import ConnectionSettings

from tests.conftest import InMemoryTokenCacheStore


ACCOUNT = {"username": "user@contoso.com", "home_account_id": "uid.utid"}


@pytest.fixture
def settings():
    return ConnectionSettings(
        tenant_id="tenant-123",
        app_client_id="client-123",
        environment_id="env-123",
        agent_identifier="cr123_agent",
    )


@pytest.fixture
def msal_app():
    """Mock MSAL public client with one cached account and a valid token."""
    app = MagicMock()
    app.get_accounts.return_value = [ACCOUNT]
    app.acquire_token_silent.return_value = {
        "access_token": "power-platform-token",
        "expires_in": 3599,
    }
    return app


@pytest.fixture
def app_factory(msal_app):
    return MagicMock(return_value=msal_app)


@pytest.fixture
def cache_store():
    return InMemoryTokenCacheStore()


@pytest.fixture
def provider(cache_store, app_factory):
    return AzureADTokenProvider(cache_store, app_factory=app_factory)


# ============================================================================
# Silent Acquisition
# ============================================================================


def test_acquire_token_success(provider, settings, app_factory, msal_app):
    """A cached account yields an access token for the Power Platform scope."""
    result = provider.acquire_token(settings)

    assert isinstance(result, AccessToken)
    assert result.value == "power-platform-token"
    assert result.expires_in == 3599
    assert result.account == "user@contoso.com"

    kwargs = app_factory.call_args.kwargs
    assert set(kwargs) == {"client_id", "authority", "token_cache", "enable_pii_log"}
    assert kwargs["client_id"] == "client-123"
    assert kwargs["authority"] == "https://login.microsoftonline.com/tenant-123"
    assert kwargs["enable_pii_log"] is False
    msal_app.acquire_token_silent.assert_called_once_with(
        [POWER_PLATFORM_SCOPE], account=ACCOUNT
    )


def test_acquire_token_uses_first_account(provider, settings, msal_app):
    other = {"username": "other@contoso.com"}
    msal_app.get_accounts.return_value = [ACCOUNT, other]

    provider.acquire_token(settings)

    assert msal_app.acquire_token_silent.call_args.kwargs["account"] == ACCOUNT


def test_acquire_token_no_accounts(provider, settings, msal_app):
    """An empty cache means the service must be signed in out of band."""
    msal_app.get_accounts.return_value = []

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert result.reason == "No cached account available"
    msal_app.acquire_token_silent.assert_not_called()


def test_acquire_token_error_result(provider, settings, msal_app):
    msal_app.acquire_token_silent.return_value = {
        "error": "invalid_grant",
        "error_description": "AADSTS700082: The refresh token has expired",
    }

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert "refresh token has expired" in result.reason


def test_acquire_token_error_without_description(provider, settings, msal_app):
    msal_app.acquire_token_silent.return_value = {"error": "interaction_required"}

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert result.reason == "interaction_required"


def test_acquire_token_none_result(provider, settings, msal_app):
    """MSAL returns None when no token is cached for the scope."""
    msal_app.acquire_token_silent.return_value = None

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert result.reason == "Silent acquisition returned no token"


def test_acquire_token_library_exception(provider, settings, msal_app):
    """Exceptions from MSAL are reported, not raised."""
    msal_app.get_accounts.side_effect = RuntimeError("network unreachable")

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert "network unreachable" in result.reason


def test_custom_authority_host_and_scopes(cache_store, app_factory, msal_app, settings):
    provider = AzureADTokenProvider(
        cache_store,
        authority_host="https://login.microsoftonline.us/",
        scopes=["https://api.gov.powerplatform.microsoft.us/.default"],
        app_factory=app_factory,
    )

    provider.acquire_token(settings)

    assert app_factory.call_args.kwargs["authority"] == (
        "https://login.microsoftonline.us/tenant-123"
    )
    msal_app.acquire_token_silent.assert_called_once_with(
        ["https://api.gov.powerplatform.microsoft.us/.default"], account=ACCOUNT
    )


# ============================================================================
# Token Cache Persistence
# ============================================================================


def test_persisted_blob_is_deserialized(settings, app_factory):
    cache_store = InMemoryTokenCacheStore(blob='{"AccessToken": {}}')
    provider = AzureADTokenProvider(cache_store, app_factory=app_factory)

    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache_cls.return_value.has_state_changed = False
        provider.acquire_token(settings)

    cache = cache_cls.return_value
    cache.deserialize.assert_called_once_with('{"AccessToken": {}}')
    assert app_factory.call_args.kwargs["token_cache"] is cache


def test_empty_store_skips_deserialize(provider, settings):
    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache_cls.return_value.has_state_changed = False
        provider.acquire_token(settings)

    cache_cls.return_value.deserialize.assert_not_called()


def test_changed_cache_is_saved(provider, settings, cache_store):
    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache = cache_cls.return_value
        cache.has_state_changed = True
        cache.serialize.return_value = '{"RefreshToken": {"rt": {}}}'
        provider.acquire_token(settings)

    assert cache_store.saved == ['{"RefreshToken": {"rt": {}}}']


def test_unchanged_cache_is_not_saved(provider, settings, cache_store):
    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache_cls.return_value.has_state_changed = False
        provider.acquire_token(settings)

    assert cache_store.saved == []


def test_changed_cache_is_saved_even_when_unauthenticated(provider, settings, cache_store, msal_app):
    msal_app.acquire_token_silent.return_value = {"error": "invalid_grant"}

    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache_cls.return_value.has_state_changed = True
        cache_cls.return_value.serialize.return_value = "{}"
        result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert cache_store.saved == ["{}"]


def test_unreadable_cache_starts_empty(settings, app_factory):
    """A load failure is logged and the acquisition proceeds with an empty cache."""
    cache_store = MagicMock(spec=ITokenCacheStore)
    cache_store.load.side_effect = TokenCacheError("Failed to read token cache")
    provider = AzureADTokenProvider(cache_store, app_factory=app_factory)

    result = provider.acquire_token(settings)

    assert isinstance(result, AccessToken)


def test_undecodable_cache_file_is_unauthenticated(settings, msal_app, tmp_path):
    """A cache file that is not UTF-8 counts as absent; acquisition does not raise."""
    path = tmp_path / "tokencache.json"
    path.write_bytes(b"\xff\xfe\x00garbage")
    msal_app.get_accounts.return_value = []
    provider = AzureADTokenProvider(
        FileTokenCacheStore(str(path)),
        app_factory=MagicMock(return_value=msal_app),
    )

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert result.reason == "No cached account available"


def test_corrupt_cache_is_discarded(settings, msal_app):
    """A blob MSAL cannot parse is cleared and acquisition proceeds on an empty cache."""
    cache_store = InMemoryTokenCacheStore(blob="{not json")
    msal_app.get_accounts.return_value = []
    provider = AzureADTokenProvider(cache_store, app_factory=MagicMock(return_value=msal_app))

    result = provider.acquire_token(settings)

    assert isinstance(result, Unauthenticated)
    assert cache_store.blob is None


def test_save_failure_does_not_fail_acquisition(settings, app_factory):
    cache_store = MagicMock(spec=ITokenCacheStore)
    cache_store.load.return_value = None
    cache_store.save.side_effect = TokenCacheError("Failed to write token cache")
    provider = AzureADTokenProvider(cache_store, app_factory=app_factory)

    with patch("copilot_relay.auth.providers.azure_ad.msal.SerializableTokenCache") as cache_cls:
        cache_cls.return_value.has_state_changed = True
        cache_cls.return_value.serialize.return_value = "{}"
        result = provider.acquire_token(settings)

    assert isinstance(result, AccessToken)
    cache_store.save.assert_called_once_with("{}")


def test_acquisition_holds_store_lock(settings, app_factory, tmp_path):
    """The lock is held while MSAL reads the cache."""
    store = FileTokenCacheStore(str(tmp_path / "cache.json"))
    observed = []

    def factory(**kwargs):
        observed.append(store._lock.locked())
        return app_factory(**kwargs)

    AzureADTokenProvider(store, app_factory=factory).acquire_token(settings)

    assert observed == [True]
    assert not store._lock.locked()


# ============================================================================
# Configuration
# ============================================================================


def test_missing_identity_fields_raise(provider, app_factory):
    settings = ConnectionSettings(environment_id="env-123", agent_identifier="cr123_agent")

    with pytest.raises(ConfigurationError) as exc_info:
        provider.acquire_token(settings)

    assert exc_info.value.details["missing_fields"] == ["tenant_id", "app_client_id"]
    app_factory.assert_not_called()


def test_create_token_provider_uses_configured_cache_path(test_settings):
    provider = create_token_provider(test_settings)

    assert isinstance(provider, AzureADTokenProvider)
    assert isinstance(provider.cache_store, FileTokenCacheStore)
    assert provider.cache_store.location == test_settings.token_cache_path
    assert provider.get_provider_name() == "azure_ad"
    assert str(provider) == "AzureADTokenProvider(provider=azure_ad)"


# ============================================================================
# Async Wrapper
# ============================================================================


@pytest.mark.asyncio
async def test_acquire_token_async(provider, settings):
    result = await provider.acquire_token_async(settings)

    assert isinstance(result, AccessToken)
    assert result.value == "power-platform-token"
