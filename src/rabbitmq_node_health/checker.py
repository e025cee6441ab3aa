"""Health check flow: fetch, parse and evaluate one node."""

import logging

from rabbitmq_node_health.client import ManagementClient, NodeUnreachableError
from rabbitmq_node_health.config import Config
from rabbitmq_node_health.evaluator import evaluate
from rabbitmq_node_health.models import HealthStatus, NodeSnapshot, Verdict

logger = logging.getLogger(__name__)


class NodeHealthCheck:
    """Run a single health check against one broker node."""
    
    def __init__(self, config: Config, client: ManagementClient | None = None) -> None:
        """Initialize the check.
        
        Args:
            config: Check configuration.
            client: Optional management API client; built from config if omitted.
        """
        self.config = config
        self.client = client or ManagementClient(config.connection)
    
    def fetch_snapshot(self) -> NodeSnapshot:
        """Fetch and parse the node's current metrics."""
        data = self.client.get_node()
        snapshot = NodeSnapshot.from_api(data)
        logger.debug(f"Snapshot for {snapshot.name or self.config.connection.node}: {snapshot}")
        return snapshot
    
    def run(self) -> Verdict:
        """Check the node and return a verdict.
        
        Never raises: a refused connection becomes CRITICAL, any other
        failure UNKNOWN, both carrying the error text as message.
        """
        try:
            snapshot = self.fetch_snapshot()
            verdict = evaluate(snapshot, self.config.thresholds)
        except NodeUnreachableError as e:
            return Verdict.from_error(HealthStatus.CRITICAL, e)
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return Verdict.from_error(HealthStatus.UNKNOWN, e)
        
        logger.info(f"Node {self.config.connection.node} is {verdict.status.value}")
        return verdict
