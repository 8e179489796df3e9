"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..domain.ports.key_value_storage import KeyValueStorage
from ..domain.ports.remote_claims_provider import RemoteClaimsProvider
from ..domain.services.analytics_service import AnalyticsService
from ..domain.services.claim_sync_service import ClaimSyncService
from ..domain.services.portfolio_transfer_service import PortfolioTransferService
from ..domain.services.profile_service import ProfileService
from .config import AppConfig
from .linkedtrust.linkedtrust_adapter import LinkedTrustAdapter
from .storage.factory import storage_factory
from .storage.local_claim_store import LocalClaimStore

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        storage: Optional[KeyValueStorage] = None,
        remote: Optional[RemoteClaimsProvider] = None,
    ):
        """Initialize service container.

        Args:
            config: Application settings; read from the environment if omitted
            storage: Storage override (tests pass a MemoryStorage)
            remote: Remote provider override
        """
        self._config = config or AppConfig.from_env()
        self._services: Dict[str, Any] = {}
        self._setup_services(storage, remote)

    def _create_storage(self) -> KeyValueStorage:
        if self._config.storage.backend == "file":
            return storage_factory.create("file", directory=self._config.storage.directory)
        return storage_factory.create(self._config.storage.backend)

    def _setup_services(
        self,
        storage: Optional[KeyValueStorage],
        remote: Optional[RemoteClaimsProvider],
    ) -> None:
        """Setup all services and their dependencies."""
        logger.info("🔧 Setting up service container...")

        # Infrastructure adapters
        storage = storage or self._create_storage()
        remote = remote or LinkedTrustAdapter(config=self._config.linkedtrust)
        local_store = LocalClaimStore(storage)

        # Domain services
        claim_sync_service = ClaimSyncService(
            remote=remote,
            local=local_store,
            subject_uri_template=self._config.linkedtrust.subject_uri_template,
            default_subject=self._config.linkedtrust.default_subject,
        )

        self._services = {
            "storage": storage,
            "remote": remote,
            "local_store": local_store,
            "claim_sync_service": claim_sync_service,
            "portfolio_transfer_service": PortfolioTransferService(local_store),
            "analytics_service": AnalyticsService(),
            "profile_service": ProfileService(storage),
        }

        logger.info("✅ Service container setup completed")

    @property
    def config(self) -> AppConfig:
        return self._config

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_claim_sync_service(self) -> ClaimSyncService:
        return self.get("claim_sync_service")

    def get_portfolio_transfer_service(self) -> PortfolioTransferService:
        return self.get("portfolio_transfer_service")

    def get_analytics_service(self) -> AnalyticsService:
        return self.get("analytics_service")

    def get_profile_service(self) -> ProfileService:
        return self.get("profile_service")

    async def shutdown(self) -> None:
        await self.get("remote").shutdown()


@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    load_dotenv()
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_claim_sync_service() -> ClaimSyncService:
    return get_service_container().get_claim_sync_service()


def get_portfolio_transfer_service() -> PortfolioTransferService:
    return get_service_container().get_portfolio_transfer_service()


def get_analytics_service() -> AnalyticsService:
    return get_service_container().get_analytics_service()


def get_profile_service() -> ProfileService:
    return get_service_container().get_profile_service()
