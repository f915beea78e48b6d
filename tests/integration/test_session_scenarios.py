"""
End-to-end session tests against a scripted in-memory server.

Each test runs the full controller: framing across small chunks, validation,
the packet store, gap-driven resend, integrity check and file export.
"""

import json
from dataclasses import replace
from pathlib import Path
from unittest.mock import Mock

import pytest

from mdc_app.config.defaults import IntegrityParams, ResendParams
from mdc_app.data.models import CallType, Request
from mdc_app.data.parsers import encode_fields, encode_packet
from mdc_app.engine import SessionController, run_session
from mdc_app.errors import PersistenceError, ResendExhaustedError, StateTransitionError
from mdc_app.state.models import FailureReason, SessionState


def _output(config) -> Path:
    return Path(config.export.output_path)


class TestHappyPath:
    """Scenario A: no loss."""

    def test_single_round_completes(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets)
        controller = SessionController(client_config, transport_factory=server.factory,
                                       sleep=sleeps.append)

        result = controller.run()

        assert result.success
        assert result.state == SessionState.SUCCEEDED
        assert result.reason == FailureReason.COMPLETE
        assert result.rounds == 1
        assert [p.sequence for p in result.packets] == [1, 2, 3, 4]
        assert server.requests == [Request.stream_all()]
        assert sleeps == []

        assert controller.machine.path() == [
            SessionState.IDLE,
            SessionState.CONNECTING,
            SessionState.REQUESTING,
            SessionState.STREAMING_INITIAL,
            SessionState.CLOSED_COMPLETE,
            SessionState.SUCCEEDED,
        ]

    def test_export_document(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets)

        run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        document = json.loads(_output(client_config).read_text())
        assert document == [p.to_dict() for p in packets]

    def test_stats(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, chunk_size=5)

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.stats.bytes_received == 68
        assert result.stats.chunks_received == 14
        assert result.stats.frames_decoded == 4
        assert result.stats.packets_inserted == 4
        assert result.stats.malformed_discarded == 0

    def test_transports_closed(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(2,))

        run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert len(server.transports) == 2
        assert all(t.closed for t in server.transports)


class TestGapHealing:
    """Scenarios B and C: dropped and corrupted packets."""

    def test_dropped_packet_resent(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(3,))
        controller = SessionController(client_config, transport_factory=server.factory,
                                       sleep=sleeps.append)

        result = controller.run()

        assert result.success
        assert server.resend_sequences == [3]
        assert server.requests[1].to_bytes() == b"\x02\x03"
        assert result.rounds == 2
        assert [p.sequence for p in result.packets] == [1, 2, 3, 4]

        path = controller.machine.path()
        assert path[4:] == [
            SessionState.CLOSED_GAPS_FOUND,
            SessionState.RESEND_ROUND,
            SessionState.CLOSED_COMPLETE,
            SessionState.SUCCEEDED,
        ]
        resend = [t for t in controller.machine.history if t.to_state == SessionState.RESEND_ROUND]
        assert resend[0].target_sequence == 3

    def test_corrupt_symbol_triggers_resend(self, scripted_server, packets, client_config, sleeps):
        bad_frame = encode_fields("ZZZZ", "B", 10, 12800, 3)
        server = scripted_server(packets, replace={3: bad_frame})
        discarded = []

        result = run_session(
            client_config,
            transport_factory=server.factory,
            sleep=sleeps.append,
            on_discard=lambda frame, error: discarded.append((frame, error.field, error.value)),
        )

        assert discarded == [(bad_frame, "symbol", "ZZZZ")]
        assert result.stats.malformed_discarded == 1
        assert server.resend_sequences == [3]
        assert result.success
        assert result.packets[2].symbol == "AMZN"
        assert result.validation["rejections_by_field"] == {"symbol": 1}
        assert result.summary()["validation"]["malformed_packets"] == 1

    def test_multiple_gaps(self, scripted_server, make_packet, client_config, sleeps):
        packets = [make_packet(seq) for seq in range(1, 9)]
        server = scripted_server(packets, drop=(2, 5, 6))

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert server.resend_sequences == [2, 5, 6]
        assert result.stats.resend_passes == 1
        assert len(result.packets) == 8

    def test_trailing_loss_is_not_a_gap(self, scripted_server, packets, client_config, sleeps):
        """Sequences above the highest seen are unknown and never requested."""
        server = scripted_server(packets, drop=(4,))

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert server.resend_sequences == []
        assert [p.sequence for p in result.packets] == [1, 2, 3]

    def test_duplicates_absorbed(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, replace={2: encode_packet(packets[0])})

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert result.stats.duplicates == 1
        assert server.resend_sequences == [2]
        assert len(result.packets) == 4

    def test_partial_tail_discarded(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(1,), trailing=b"\x00\x01\x02")

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert result.stats.partial_bytes_discarded == 6

    def test_packet_filled_mid_pass_is_skipped(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(2, 3))
        respond = server.respond

        def respond_with_extra(request):
            data = respond(request)
            if request.call_type == CallType.RESEND_ONE and request.resend_seq == 2:
                data += encode_packet(packets[2])
            return data

        server.respond = respond_with_extra

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert server.resend_sequences == [2]


class TestResendBounds:
    """Bounded resend with backoff."""

    def test_exhausted(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(3,), withhold=(3,))
        controller = SessionController(client_config, transport_factory=server.factory,
                                       sleep=sleeps.append)

        result = controller.run()

        assert result.success is False
        assert result.state == SessionState.FAILED
        assert result.reason == FailureReason.RESEND_EXHAUSTED
        assert result.missing == [3]
        assert isinstance(result.error, ResendExhaustedError)
        assert result.error.passes == 3
        assert server.resend_sequences == [3, 3, 3]
        assert sleeps == [0.01, 0.02]
        assert result.packets == []
        assert not _output(client_config).exists()

    def test_resend_disabled(self, scripted_server, packets, client_config, sleeps):
        config = replace(client_config, resend=ResendParams(max_passes=0))
        server = scripted_server(packets, drop=(2,))

        result = run_session(config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.reason == FailureReason.RESEND_EXHAUSTED
        assert server.resend_sequences == []

    def test_sequence_truncated_on_wire(self, scripted_server, make_packet, client_config, sleeps):
        """A sequence above 255 is requested by its low byte and cannot heal."""
        packets = [make_packet(seq) for seq in range(1, 301)]
        server = scripted_server(packets, drop=(299,))

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.reason == FailureReason.RESEND_EXHAUSTED
        assert result.missing == [299]
        assert server.resend_sequences == [299 & 0xFF] * 3
        assert result.stats.duplicates == 3

    def test_far_sequence_fails_without_walking_gap(self, scripted_server, packets, make_packet,
                                                    client_config, sleeps):
        """A corrupted high sequence ends the session before any resend."""
        config = replace(client_config, resend=replace(client_config.resend, max_gap=100))
        server = scripted_server(packets + [make_packet(2**31 - 1, price=1)])

        result = run_session(config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.reason == FailureReason.RESEND_EXHAUSTED
        assert result.error.passes == 0
        assert result.missing == list(range(5, 105))
        assert server.resend_sequences == []
        assert sleeps == []
        assert not _output(config).exists()


class TestTransportFailures:
    """Transport errors in the initial and resend rounds."""

    def test_initial_connect_refused(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, refuse=(1,))
        controller = SessionController(client_config, transport_factory=server.factory,
                                       sleep=sleeps.append)

        result = controller.run()

        assert result.reason == FailureReason.TRANSPORT_ERROR
        assert result.error.operation == "connect"
        assert result.stats.transport_errors == 1
        assert controller.machine.path()[-2:] == [SessionState.CONNECTING, SessionState.FAILED]
        assert server.requests == []
        assert not _output(client_config).exists()

    def test_initial_read_failure(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, fail_read=(1,))

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.reason == FailureReason.TRANSPORT_ERROR
        assert result.error.operation == "read"
        assert not _output(client_config).exists()

    def test_resend_round_retried_after_failure(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets, drop=(2,), refuse=(2,))

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert result.stats.transport_errors == 1
        assert result.stats.resend_passes == 2
        assert server.resend_sequences == [2]
        assert sleeps == [0.01]


class TestFinalization:
    """Integrity and export outcomes."""

    def test_empty_stream_is_integrity_violation(self, scripted_server, client_config, sleeps):
        server = scripted_server([])

        result = run_session(client_config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.reason == FailureReason.INTEGRITY_VIOLATION
        assert result.error.expected == 1
        assert result.error.actual == 0
        assert not _output(client_config).exists()

    def test_empty_stream_allowed(self, scripted_server, client_config, sleeps):
        config = replace(client_config, integrity=IntegrityParams(allow_empty=True))
        server = scripted_server([])

        result = run_session(config, transport_factory=server.factory, sleep=sleeps.append)

        assert result.success
        assert json.loads(_output(config).read_text()) == []

    def test_persistence_failure(self, scripted_server, packets, client_config, sleeps):
        sink = Mock()
        sink.export.side_effect = PersistenceError("disk full", operation="write", target="x")
        server = scripted_server(packets)

        result = run_session(client_config, transport_factory=server.factory, sink=sink,
                             sleep=sleeps.append)

        assert result.success is False
        assert result.reason == FailureReason.PERSISTENCE_ERROR
        sink.export.assert_called_once()

    def test_controller_runs_once(self, scripted_server, packets, client_config, sleeps):
        server = scripted_server(packets)
        controller = SessionController(client_config, transport_factory=server.factory,
                                       sleep=sleeps.append)
        controller.run()

        with pytest.raises(StateTransitionError):
            controller.run()
