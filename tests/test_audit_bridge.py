"""Tests for audit events, sinks and the correlation audit bridge."""

import json
import logging

import pytest

from querygov_svc.audit import (
    AuditEvent,
    AuditEventType,
    AuditOutcome,
    CorrelationAuditBridge,
    create_bridge,
    create_sink,
    new_correlation_id,
)
from querygov_svc.audit.sinks import ConsoleSink, FileSink, LogSink
from querygov_svc.config import AuditConfig


class TestAuditEvent:
    def test_correlation_id_format(self):
        cid = new_correlation_id()
        assert cid.startswith("corr_")
        assert cid != new_correlation_id()

    def test_to_dict(self):
        event = AuditEvent.create(
            "corr_1", AuditEventType.QUERY_CREATE, {"name": "acct_summary"}, actor="alice",
        )
        d = event.to_dict()
        assert d["correlation_id"] == "corr_1"
        assert d["event_type"] == "query_create"
        assert d["outcome"] == "success"
        assert d["actor"] == "alice"
        assert d["payload"] == {"name": "acct_summary"}
        assert d["timestamp"]


class TestBridge:
    def test_emit_reaches_sink(self, audit_bridge, recording_sink):
        assert audit_bridge.emit("corr_1", AuditEventType.QUERY_UPDATE, {"query_id": 1})
        [event] = recording_sink.events
        assert event.correlation_id == "corr_1"
        assert event.event_type == AuditEventType.QUERY_UPDATE
        assert audit_bridge.stats["emitted"] == 1

    def test_failing_sink_is_contained(self, recording_sink, failing_sink):
        bridge = CorrelationAuditBridge([failing_sink, recording_sink])
        delivered = bridge.emit("corr_2", AuditEventType.QUERY_DELETE, outcome=AuditOutcome.IN_USE)
        assert delivered is False
        assert len(recording_sink.events) == 1
        assert bridge.stats["errors"] == 1

    def test_failure_is_logged(self, failing_sink, caplog):
        bridge = CorrelationAuditBridge([failing_sink])
        with caplog.at_level(logging.ERROR):
            bridge.emit("corr_3", AuditEventType.QUERY_CREATE)
        assert "corr_3" in caplog.text

    def test_disabled_bridge(self, recording_sink):
        bridge = CorrelationAuditBridge([recording_sink], enabled=False)
        assert bridge.emit("corr_4", AuditEventType.QUERY_CREATE) is False
        assert recording_sink.events == []

    def test_add_sink(self, recording_sink):
        bridge = CorrelationAuditBridge()
        assert bridge.emit("corr_5", AuditEventType.QUERY_CREATE)
        bridge.add_sink(recording_sink)
        bridge.emit("corr_6", AuditEventType.QUERY_CREATE)
        assert [e.correlation_id for e in recording_sink.events] == ["corr_6"]
        assert bridge.stats["sinks"] == 1

    def test_close_closes_sinks(self, audit_bridge, recording_sink):
        audit_bridge.close()
        assert recording_sink.closed


class TestSinks:
    def test_log_sink(self, caplog):
        event = AuditEvent.create("corr_5", AuditEventType.MAPPING_SUGGEST, {"columns": 3})
        with caplog.at_level(logging.INFO, logger="querygov_svc.audit"):
            LogSink().send(event)
        [record] = caplog.records
        assert record.name == "querygov_svc.audit"
        assert record.levelno == logging.INFO
        assert "corr_5" in record.getMessage()

    def test_log_sink_warns_on_failure_outcome(self, caplog):
        event = AuditEvent.create("corr_6", AuditEventType.QUERY_UPDATE, outcome=AuditOutcome.CONFLICT)
        with caplog.at_level(logging.INFO, logger="querygov_svc.audit"):
            LogSink().send(event)
        assert caplog.records[0].levelno == logging.WARNING

    def test_console_sink(self, capsys):
        ConsoleSink().send(AuditEvent.create("corr_7", AuditEventType.QUERY_CREATE))
        out = capsys.readouterr().out
        assert out.startswith("[AUDIT] ")
        assert json.loads(out[len("[AUDIT] "):])["correlation_id"] == "corr_7"

    def test_console_sink_compact(self, capsys):
        ConsoleSink(format="compact", prefix="").send(AuditEvent.create("corr_8", AuditEventType.QUERY_CREATE))
        assert "corr_8 query_create success" in capsys.readouterr().out

    def test_file_sink_jsonl(self, tmp_path):
        path = tmp_path / "audit" / "events.jsonl"
        sink = FileSink(path=str(path))
        sink.send(AuditEvent.create("corr_9", AuditEventType.QUERY_CREATE))
        sink.send(AuditEvent.create("corr_10", AuditEventType.QUERY_DELETE))
        sink.close()
        lines = path.read_text().splitlines()
        assert [json.loads(line)["correlation_id"] for line in lines] == ["corr_9", "corr_10"]


class TestFactories:
    @pytest.mark.parametrize("sink_type,cls", [("log", LogSink), ("console", ConsoleSink), ("CONSOLE", ConsoleSink)])
    def test_create_sink(self, sink_type, cls):
        assert isinstance(create_sink(AuditConfig(sink_type=sink_type)), cls)

    def test_create_file_sink(self, tmp_path):
        sink = create_sink(AuditConfig(sink_type="file", sink_config={"path": str(tmp_path / "a.jsonl")}))
        assert isinstance(sink, FileSink)

    def test_unknown_sink(self):
        with pytest.raises(ValueError):
            create_sink(AuditConfig(sink_type="kafka"))

    def test_disabled_config(self):
        assert create_bridge(AuditConfig(enabled=False)).enabled is False
