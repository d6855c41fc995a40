"""Centralized dependency injection container.

All providers read from ``config``, which ``api.main`` fills
from the ``Settings`` object once at startup.
"""
from dependency_injector import containers, providers

from infra.convai_client import ConvaiClient
from infra.resources import DatabaseResource, RedisResource
from infra.session_store import InMemorySessionStore, RedisSessionStore


def _secret(value) -> str:
    """Unwrap pydantic SecretStr values passed through the configuration provider."""
    if value is None:
        return ""
    return value.get_secret_value() if hasattr(value, "get_secret_value") else str(value)


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies."""

    config = providers.Configuration()

    # Database
    database = providers.Singleton(
        DatabaseResource,
        database_url=config.DATABASE.DATABASE_URL,
    )

    # Redis
    redis_db = providers.Singleton(
        RedisResource,
        redis_url=config.REDIS.REDIS_URL,
    )

    # Session store, selected by SESSION_BACKEND
    session_store = providers.Selector(
        config.SESSION.SESSION_BACKEND,
        redis=providers.Singleton(RedisSessionStore, redis=redis_db),
        memory=providers.Singleton(InMemorySessionStore),
    )

    # Upstream Convai API
    convai_client = providers.Singleton(
        ConvaiClient,
        base_url=config.CONVAI.CONVAI_BASE_URL,
        api_key=providers.Callable(_secret, config.CONVAI.ELEVENLABS_API_KEY),
        timeout=config.CONVAI.CONVAI_TIMEOUT_SECONDS,
    )

    # Identity provider
    identity_provider = providers.Singleton(
        "api.features.auth.providers.GoogleIdentityProvider",
        client_id=config.GOOGLE.GOOGLE_CLIENT_ID,
        client_secret=providers.Callable(_secret, config.GOOGLE.GOOGLE_CLIENT_SECRET),
        redirect_uri=config.GOOGLE.GOOGLE_REDIRECT_URI,
        auth_url=config.GOOGLE.GOOGLE_AUTH_URL,
        token_url=config.GOOGLE.GOOGLE_TOKEN_URL,
        userinfo_url=config.GOOGLE.GOOGLE_USERINFO_URL,
        timeout=config.GOOGLE.GOOGLE_TIMEOUT_SECONDS,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    config = providers.Configuration()
    infrastructure = providers.DependenciesContainer()

    session_manager = providers.Singleton(
        "api.features.auth.sessions.SessionManager",
        store=infrastructure.session_store,
        ttl_seconds=config.SESSION.SESSION_TTL_SECONDS,
        sliding=config.SESSION.SESSION_SLIDING,
        cookie_name=config.SESSION.SESSION_COOKIE_NAME,
        cookie_secure=config.SESSION.SESSION_COOKIE_SECURE,
        cookie_samesite=config.SESSION.SESSION_COOKIE_SAMESITE,
    )

    account_service = providers.Factory(
        "api.features.accounts.service.AccountService",
    )

    ownership_registrar = providers.Factory(
        "api.features.accounts.service.OwnershipRegistrar",
    )

    identity_service = providers.Factory(
        "api.features.auth.service.IdentityService",
    )

    conversation_gateway = providers.Factory(
        "api.features.conversations.service.ConversationGateway",
        client=infrastructure.convai_client,
        registrar=ownership_registrar,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    config = providers.Configuration()
    infrastructure = providers.DependenciesContainer()
    services = providers.DependenciesContainer()

    auth_controller = providers.Factory(
        "api.features.auth.controller.AuthController",
        identity_provider=infrastructure.identity_provider,
        identity_service=services.identity_service,
        session_manager=services.session_manager,
        account_service=services.account_service,
        frontend_url=config.APP.FRONTEND_URL,
        failure_url=config.APP.AUTH_FAILURE_URL,
        state_cookie_name=config.SESSION.OAUTH_STATE_COOKIE_NAME,
        state_ttl_seconds=config.SESSION.OAUTH_STATE_TTL_SECONDS,
    )

    conversation_controller = providers.Factory(
        "api.features.conversations.controller.ConversationController",
        gateway=services.conversation_gateway,
        registrar=services.ownership_registrar,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.shared.db",
            "api.features.auth.gate",
            "api.features.auth.router",
            "api.features.conversations.router",
        ]
    )

    config = providers.Configuration()

    infrastructure = providers.Container(InfrastructureContainer, config=config)
    services = providers.Container(
        ServiceContainer, config=config, infrastructure=infrastructure
    )
    controllers = providers.Container(
        ControllerContainer,
        config=config,
        infrastructure=infrastructure,
        services=services,
    )
