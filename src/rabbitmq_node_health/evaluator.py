"""Threshold evaluation for a node snapshot.

Pure functions only: no I/O and no state between calls. Each check may add
a finding; findings are folded into one status with :func:`escalate` and
kept in evaluation order (memory, sockets, file descriptors, alarms).
"""

from rabbitmq_node_health.config import Thresholds
from rabbitmq_node_health.models import (
    FileDescriptors,
    Finding,
    HealthStatus,
    NodeSnapshot,
    Verdict,
    escalate,
)


def utilization(used: float, total: float) -> float:
    """Percentage of ``total`` in use, rounded to two decimals."""
    return round(used / total * 100, 2)


def check_level(
    label: str,
    percent: float,
    warning: float,
    critical: float,
) -> Finding | None:
    """Compare a utilization percentage against its warning/critical bounds."""
    if percent >= critical:
        return Finding(HealthStatus.CRITICAL, f"{label} usage is critical: {percent:.2f}%;")
    if percent >= warning:
        return Finding(HealthStatus.WARNING, f"{label} usage is at warning: {percent:.2f}%;")
    return None


def _file_descriptor_finding(snapshot: NodeSnapshot, thresholds: Thresholds) -> Finding | None:
    usage = snapshot.file_descriptors
    if not isinstance(usage, FileDescriptors):
        return None
    # Descriptor bounds historically never fired; only evaluate on request
    if not thresholds.check_file_descriptors:
        return None
    return check_level(
        "File Descriptor",
        utilization(usage.used, usage.total),
        thresholds.fd_warning,
        thresholds.fd_critical,
    )


def collect_findings(snapshot: NodeSnapshot, thresholds: Thresholds) -> list[Finding]:
    """Run every check against the snapshot, in order."""
    findings = [
        check_level(
            "Memory",
            utilization(snapshot.memory_used, snapshot.memory_limit),
            thresholds.memory_warning,
            thresholds.memory_critical,
        ),
        check_level(
            "Socket",
            utilization(snapshot.sockets_used, snapshot.sockets_total),
            thresholds.socket_warning,
            thresholds.socket_critical,
        ),
        _file_descriptor_finding(snapshot, thresholds),
    ]
    
    if thresholds.watch_alarms:
        if snapshot.memory_alarm_active:
            findings.append(Finding(HealthStatus.CRITICAL, " Memory Alarm ON"))
        if snapshot.disk_alarm_active:
            findings.append(Finding(HealthStatus.CRITICAL, " Disk Alarm ON"))
    
    return [f for f in findings if f is not None]


def evaluate(snapshot: NodeSnapshot, thresholds: Thresholds) -> Verdict:
    """Evaluate a node snapshot against thresholds.
    
    Args:
        snapshot: Node metrics fetched from the management API.
        thresholds: Warning/critical bounds and alarm handling.
    
    Returns:
        Verdict whose status is the worst finding, or OK with the
        healthy message when nothing was found.
    """
    findings = collect_findings(snapshot, thresholds)
    
    status = HealthStatus.OK
    for finding in findings:
        status = escalate(status, finding.status)
    
    return Verdict.from_findings(status, findings)
