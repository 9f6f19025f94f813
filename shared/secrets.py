"""
Secrets management backed by the Dapr sidecar secret store.
"""

from typing import Any, Dict, Optional

import httpx

from shared.errors import ConfigurationError
from shared.logging import get_logger


class SidecarSecretStore:
    """
    Reads secrets through the sidecar secrets API.

    ``GET http://{host}:{port}/v1.0/secrets/{store}/{name}`` returns a JSON
    object keyed by secret name.
    """

    def __init__(
        self,
        host: str,
        port: int,
        store_name: str = "secret-store",
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the secret store client.

        Args:
            host: Sidecar host
            port: Sidecar HTTP port
            store_name: Name of the secret store component
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = f"http://{host}:{port}/v1.0/secrets/{store_name}"
        self.store_name = store_name
        self.timeout = timeout
        self._transport = transport
        self.logger = get_logger("admin.secrets")

    async def get_secret(self, secret_name: str) -> str:
        """
        Get a secret value.

        Args:
            secret_name: Name of the secret to retrieve

        Returns:
            Secret value

        Raises:
            ConfigurationError: if the secret cannot be retrieved
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/{secret_name}")
        except httpx.HTTPError as e:
            self.logger.error(
                "Failed to reach secret store",
                secret_name=secret_name,
                store=self.store_name,
                error=str(e),
            )
            raise ConfigurationError(
                f"Secret store unavailable while reading '{secret_name}'",
                details={"store": self.store_name},
            ) from e

        if response.status_code != 200:
            self.logger.error(
                "Secret store returned an error",
                secret_name=secret_name,
                store=self.store_name,
                status_code=response.status_code,
            )
            raise ConfigurationError(
                f"Secret '{secret_name}' could not be read from store",
                details={"store": self.store_name, "status_code": response.status_code},
            )

        values: Dict[str, Any] = response.json()
        if secret_name not in values or not values[secret_name]:
            raise ConfigurationError(
                f"Secret '{secret_name}' not found in store",
                details={"store": self.store_name},
            )

        self.logger.debug("Retrieved secret", secret_name=secret_name, store=self.store_name)
        return str(values[secret_name])
