"""
RabbitMQ Node Health - monitoring plugin for a single RabbitMQ node.

Queries the management API of a broker node, checks memory, socket and
file descriptor usage plus resource alarms against configurable thresholds,
and reports one ok/warning/critical/unknown verdict.
"""

__version__ = "1.0.0"

from rabbitmq_node_health.checker import NodeHealthCheck
from rabbitmq_node_health.config import Config, ConnectionConfig, Thresholds
from rabbitmq_node_health.evaluator import evaluate
from rabbitmq_node_health.models import HealthStatus, NodeSnapshot, Verdict

__all__ = [
    "Config",
    "ConnectionConfig",
    "Thresholds",
    "evaluate",
    "HealthStatus",
    "NodeSnapshot",
    "Verdict",
    "NodeHealthCheck",
]
