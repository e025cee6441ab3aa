"""Data models for node health evaluation."""

from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any

HEALTHY_MESSAGE = "Server is healthy."


class SnapshotError(ValueError):
    """Raised when a management API response cannot be turned into a snapshot."""


class HealthStatus(str, Enum):
    """Verdict severity levels."""
    
    OK = "ok"
    WARNING = "warning"
    CRITICAL = "critical"
    UNKNOWN = "unknown"


def escalate(current: HealthStatus, finding: HealthStatus) -> HealthStatus:
    """Fold a finding into the current status.
    
    Severity only ever rises: ok -> warning -> critical. Once critical is
    reached nothing lowers it. UNKNOWN is never produced here.
    """
    if current == HealthStatus.OK:
        return finding
    if current == HealthStatus.WARNING and finding == HealthStatus.CRITICAL:
        return finding
    return current


@dataclass(frozen=True)
class FileDescriptors:
    """Numeric file descriptor counts reported by the node."""
    
    used: float
    total: float


@dataclass(frozen=True)
class FileDescriptorsUnsupported:
    """The node does not report file descriptor usage (e.g. "unknown" on macOS)."""
    
    raw: Any = None


FileDescriptorUsage = FileDescriptors | FileDescriptorsUnsupported


def _is_number(value: Any) -> bool:
    # JSON true/false decode to bool, which is a Real subclass
    return isinstance(value, Real) and not isinstance(value, bool)


def _require_number(data: dict[str, Any], key: str) -> float:
    if key not in data:
        raise SnapshotError(f"Missing field '{key}' in node response")
    value = data[key]
    if not _is_number(value):
        raise SnapshotError(f"Field '{key}' is not numeric: {value!r}")
    return value


@dataclass(frozen=True)
class NodeSnapshot:
    """Resource usage of a single broker node, as reported by the management API."""
    
    memory_used: float
    memory_limit: float
    sockets_used: float
    sockets_total: float
    file_descriptors: FileDescriptorUsage = field(default_factory=FileDescriptorsUnsupported)
    memory_alarm_active: bool = False
    disk_alarm_active: bool = False
    name: str | None = None
    
    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "NodeSnapshot":
        """Build a snapshot from a decoded ``/api/nodes/<name>`` response.
        
        Raises:
            SnapshotError: If a required field is missing or unusable.
        """
        if not isinstance(data, dict):
            raise SnapshotError(f"Unexpected node response: {type(data).__name__}")
        
        memory_limit = _require_number(data, "mem_limit")
        sockets_total = _require_number(data, "sockets_total")
        if memory_limit <= 0:
            raise SnapshotError(f"Field 'mem_limit' must be positive: {memory_limit}")
        if sockets_total <= 0:
            raise SnapshotError(f"Field 'sockets_total' must be positive: {sockets_total}")
        
        fd_used = data.get("fd_used")
        fd_total = data.get("fd_total")
        if _is_number(fd_used) and _is_number(fd_total) and fd_total > 0:
            file_descriptors: FileDescriptorUsage = FileDescriptors(used=fd_used, total=fd_total)
        else:
            file_descriptors = FileDescriptorsUnsupported(raw=fd_used)
        
        return cls(
            memory_used=_require_number(data, "mem_used"),
            memory_limit=memory_limit,
            sockets_used=_require_number(data, "sockets_used"),
            sockets_total=sockets_total,
            file_descriptors=file_descriptors,
            memory_alarm_active=data.get("mem_alarm") is True,
            disk_alarm_active=data.get("disk_free_alarm") is True,
            name=data.get("name"),
        )


@dataclass(frozen=True)
class Finding:
    """A single threshold breach or alarm observed during evaluation."""
    
    status: HealthStatus
    text: str


@dataclass(frozen=True)
class Verdict:
    """Outcome of one health check run."""
    
    status: HealthStatus
    message: str
    findings: tuple[Finding, ...] = ()
    
    @classmethod
    def from_findings(cls, status: HealthStatus, findings: list[Finding]) -> "Verdict":
        """Join findings into the final message, in the order they were found."""
        if status == HealthStatus.OK:
            message = HEALTHY_MESSAGE
        else:
            message = "".join(f.text for f in findings)
        return cls(status=status, message=message, findings=tuple(findings))
    
    @classmethod
    def from_error(cls, status: HealthStatus, error: BaseException | str) -> "Verdict":
        """Verdict for a run that could not evaluate the node at all."""
        text = str(error)
        if not text and isinstance(error, BaseException):
            text = type(error).__name__
        return cls(status=status, message=text or "Unknown error")
    
    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "message": self.message,
            "findings": [
                {"status": f.status.value, "text": f.text}
                for f in self.findings
            ],
        }
