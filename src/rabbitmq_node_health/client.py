"""HTTP client for the RabbitMQ management API."""

import errno
import logging
from typing import Any

import httpx

from rabbitmq_node_health.config import ConnectionConfig

logger = logging.getLogger(__name__)


class ManagementAPIError(Exception):
    """Raised when the management API cannot be queried."""


class NodeUnreachableError(ManagementAPIError):
    """Raised when the management API refused the connection."""


def is_connection_refused(exc: BaseException) -> bool:
    """Check whether an exception was caused by a refused TCP connection."""
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        current = current.__cause__ or current.__context__
    return False


class ManagementClient:
    """Fetch node records from the management API."""
    
    def __init__(
        self,
        config: ConnectionConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize client.
        
        Args:
            config: Connection settings.
            transport: Optional httpx transport, mainly for tests.
        """
        self.config = config
        self.transport = transport
    
    def _client(self) -> httpx.Client:
        return httpx.Client(
            auth=httpx.BasicAuth(self.config.username, self.config.password),
            verify=not self.config.verify_ssl_off,
            timeout=self.config.timeout,
            transport=self.transport,
        )
    
    def get_node(self) -> dict[str, Any]:
        """Fetch the configured node's record.
        
        Returns:
            Decoded JSON body of ``/api/nodes/<node>``.
        
        Raises:
            NodeUnreachableError: If the connection was refused.
            ManagementAPIError: On any other connection failure or an error HTTP status.
            ValueError: If the body is not valid JSON.
        """
        url = self.config.node_url
        logger.info(f"Querying management API: {url}")
        
        try:
            with self._client() as client:
                response = client.get(url)
        except httpx.ConnectError as e:
            logger.error(f"Cannot connect to {self.config.base_url}: {e}")
            # DNS and TLS failures also surface as ConnectError
            if is_connection_refused(e):
                raise NodeUnreachableError(str(e)) from e
            raise ManagementAPIError(str(e)) from e
        
        if response.status_code != 200:
            logger.error(f"Management API error: {response.status_code}")
            raise ManagementAPIError(f"{response.status_code} {response.reason_phrase}")
        
        return response.json()
