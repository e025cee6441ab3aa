"""Tests for data models."""

import pytest

from rabbitmq_node_health.models import (
    HEALTHY_MESSAGE,
    FileDescriptors,
    FileDescriptorsUnsupported,
    Finding,
    HealthStatus,
    NodeSnapshot,
    SnapshotError,
    Verdict,
    escalate,
)


@pytest.fixture
def node_response():
    """A trimmed /api/nodes/rabbit@<host> response."""
    return {
        "name": "rabbit@localhost",
        "mem_used": 500,
        "mem_limit": 1000,
        "sockets_used": 10,
        "sockets_total": 100,
        "fd_used": 40,
        "fd_total": 1024,
        "mem_alarm": False,
        "disk_free_alarm": False,
        "running": True,
    }


class TestHealthStatus:
    """Tests for HealthStatus enum."""
    
    def test_status_values(self):
        assert HealthStatus.OK.value == "ok"
        assert HealthStatus.WARNING.value == "warning"
        assert HealthStatus.CRITICAL.value == "critical"
        assert HealthStatus.UNKNOWN.value == "unknown"


class TestEscalate:
    """Tests for the severity escalation rule."""
    
    @pytest.mark.parametrize("finding", [HealthStatus.WARNING, HealthStatus.CRITICAL])
    def test_ok_takes_finding(self, finding):
        assert escalate(HealthStatus.OK, finding) == finding
    
    def test_warning_rises_to_critical(self):
        assert escalate(HealthStatus.WARNING, HealthStatus.CRITICAL) == HealthStatus.CRITICAL
    
    def test_warning_stays_warning(self):
        assert escalate(HealthStatus.WARNING, HealthStatus.WARNING) == HealthStatus.WARNING
    
    @pytest.mark.parametrize("finding", [HealthStatus.WARNING, HealthStatus.CRITICAL])
    def test_critical_absorbs(self, finding):
        assert escalate(HealthStatus.CRITICAL, finding) == HealthStatus.CRITICAL
    
    def test_never_decreases(self):
        order = [HealthStatus.OK, HealthStatus.WARNING, HealthStatus.CRITICAL]
        sequence = [
            HealthStatus.WARNING,
            HealthStatus.CRITICAL,
            HealthStatus.WARNING,
            HealthStatus.WARNING,
            HealthStatus.CRITICAL,
        ]
        status = HealthStatus.OK
        for finding in sequence:
            new = escalate(status, finding)
            assert order.index(new) >= order.index(status)
            assert order.index(new) >= order.index(finding)
            status = new
        assert status == HealthStatus.CRITICAL


class TestNodeSnapshot:
    """Tests for parsing management API responses."""
    
    def test_from_api(self, node_response):
        snapshot = NodeSnapshot.from_api(node_response)
        assert snapshot.name == "rabbit@localhost"
        assert snapshot.memory_used == 500
        assert snapshot.memory_limit == 1000
        assert snapshot.sockets_used == 10
        assert snapshot.sockets_total == 100
        assert snapshot.file_descriptors == FileDescriptors(used=40, total=1024)
        assert snapshot.memory_alarm_active is False
        assert snapshot.disk_alarm_active is False
    
    def test_non_numeric_fd_is_unsupported(self, node_response):
        node_response["fd_used"] = "unknown"
        snapshot = NodeSnapshot.from_api(node_response)
        assert snapshot.file_descriptors == FileDescriptorsUnsupported(raw="unknown")
    
    def test_missing_fd_is_unsupported(self, node_response):
        del node_response["fd_used"]
        del node_response["fd_total"]
        snapshot = NodeSnapshot.from_api(node_response)
        assert isinstance(snapshot.file_descriptors, FileDescriptorsUnsupported)
    
    def test_alarms_must_be_true(self, node_response):
        node_response["mem_alarm"] = True
        node_response["disk_free_alarm"] = "true"
        snapshot = NodeSnapshot.from_api(node_response)
        assert snapshot.memory_alarm_active is True
        assert snapshot.disk_alarm_active is False
    
    def test_missing_field(self, node_response):
        del node_response["mem_used"]
        with pytest.raises(SnapshotError, match="mem_used"):
            NodeSnapshot.from_api(node_response)
    
    def test_boolean_is_not_numeric(self, node_response):
        node_response["sockets_used"] = True
        with pytest.raises(SnapshotError, match="sockets_used"):
            NodeSnapshot.from_api(node_response)
    
    @pytest.mark.parametrize("key", ["mem_limit", "sockets_total"])
    def test_zero_limit(self, node_response, key):
        node_response[key] = 0
        with pytest.raises(SnapshotError, match=key):
            NodeSnapshot.from_api(node_response)
    
    def test_not_a_mapping(self):
        with pytest.raises(SnapshotError):
            NodeSnapshot.from_api([{"mem_used": 1}])


class TestVerdict:
    """Tests for Verdict construction."""
    
    def test_ok_uses_healthy_message(self):
        verdict = Verdict.from_findings(HealthStatus.OK, [])
        assert verdict.message == HEALTHY_MESSAGE
        assert verdict.findings == ()
    
    def test_findings_joined_in_order(self):
        findings = [
            Finding(HealthStatus.WARNING, "Memory usage is at warning: 85.00%;"),
            Finding(HealthStatus.CRITICAL, " Disk Alarm ON"),
        ]
        verdict = Verdict.from_findings(HealthStatus.CRITICAL, findings)
        assert verdict.message == "Memory usage is at warning: 85.00%; Disk Alarm ON"
        assert verdict.findings == tuple(findings)
    
    def test_from_error(self):
        verdict = Verdict.from_error(HealthStatus.CRITICAL, ConnectionRefusedError("Connection refused"))
        assert verdict.status == HealthStatus.CRITICAL
        assert verdict.message == "Connection refused"
    
    def test_from_error_never_empty(self):
        verdict = Verdict.from_error(HealthStatus.UNKNOWN, KeyError())
        assert verdict.message == "KeyError"
    
    def test_to_dict(self):
        verdict = Verdict.from_findings(
            HealthStatus.WARNING,
            [Finding(HealthStatus.WARNING, "Socket usage is at warning: 81.00%;")],
        )
        data = verdict.to_dict()
        assert data["status"] == "warning"
        assert data["message"] == "Socket usage is at warning: 81.00%;"
        assert data["findings"] == [
            {"status": "warning", "text": "Socket usage is at warning: 81.00%;"},
        ]
