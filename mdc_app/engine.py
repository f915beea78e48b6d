"""
Session controller coordinator.

Orchestrates one market data session:
connect → request all → receive until close → gap check → (resend | finalize).

The controller owns the packet store and the session state machine. Only one
transport is open at a time and each round's stream is drained completely, in
arrival order, before the next action is taken.
"""

import time
import uuid
from collections.abc import Callable, Iterable, Iterator
from typing import Optional

from .config.defaults import ClientConfig, get_default_config
from .data.framing import FrameDecoder, iter_frames
from .data.models import Request
from .data.store import PacketStore
from .data.validators import PacketValidator
from .delivery import BaseExportSink, create_sink
from .errors import (
    IntegrityViolationError,
    MalformedPacketError,
    PersistenceError,
    ResendExhaustedError,
    TransportError,
)
from .logging.config import get_session_logger
from .state.machine import SessionStateMachine
from .state.models import FailureReason, SessionResult, SessionState, SessionStats
from .transport import TcpTransport, Transport
from .utils.backoff import BackoffPolicy
from .validation.integrity import verify_integrity

TransportFactory = Callable[[], Transport]
DiscardHook = Callable[[bytes, MalformedPacketError], None]


class SessionController:
    """
    Drives a single gap-healing download session.

    Usage:
        result = SessionController(config).run()
        if not result.success:
            print(result.reason, result.message)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
        sink: Optional[BaseExportSink] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_discard: Optional[DiscardHook] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.config = config or get_default_config()
        self.transport_factory = transport_factory or self._default_transport
        self.sink = sink or create_sink(self.config.export)
        self.on_discard = on_discard
        self._sleep = sleep

        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.store = PacketStore(self.config.protocol.valid_symbols)
        self.validator = PacketValidator(self.config.protocol.valid_symbols)
        self.machine = SessionStateMachine(self.session_id)
        self.backoff = BackoffPolicy.from_params(self.config.resend)
        self.stats = SessionStats()
        self.rounds = 0

        self.logger = get_session_logger(__name__).bind(session_id=self.session_id)

    @property
    def state(self) -> SessionState:
        return self.machine.state

    def run(self) -> SessionResult:
        """
        Run the session to a terminal state.

        Session-level failures are returned as a failed SessionResult with a
        reason code; nothing is exported on failure.
        """
        endpoint = f"{self.config.transport.host}:{self.config.transport.port}"
        self.machine.transition(
            SessionState.CONNECTING, "session_start", context={"endpoint": endpoint}
        )

        try:
            self._initial_round()
        except TransportError as e:
            self.stats.transport_errors += 1
            return self._fail(FailureReason.TRANSPORT_ERROR, e)

        resend = self.config.resend
        passes = 0

        while not self.store.is_complete():
            missing_count = self.store.missing_count()
            self.machine.transition(
                SessionState.CLOSED_GAPS_FOUND,
                "gap_check",
                context={"missing_count": missing_count, "max_sequence": self.store.max_sequence}
            )

            if missing_count > resend.max_gap:
                error = ResendExhaustedError(
                    f"{missing_count} sequence(s) missing below {self.store.max_sequence}, "
                    f"more than max_gap {resend.max_gap}",
                    missing=self.store.missing_sequences(limit=resend.max_gap),
                    passes=passes
                )
                return self._fail(FailureReason.RESEND_EXHAUSTED, error, missing=error.missing)

            missing = self.store.missing_sequences()
            self.logger.info("Missing sequences", missing=missing)

            if passes >= resend.max_passes:
                error = ResendExhaustedError(
                    f"Still missing {len(missing)} sequence(s) after {passes} resend pass(es): {missing}",
                    missing=missing,
                    passes=passes
                )
                return self._fail(FailureReason.RESEND_EXHAUSTED, error, missing=missing)

            passes += 1
            self.stats.resend_passes = passes
            delay = self.backoff.delay_before_pass(passes)
            if delay > 0:
                self.logger.info("Backing off before resend pass", resend_pass=passes, delay_s=delay)
                self._sleep(delay)

            for sequence in missing:
                # an earlier response in this pass may already have filled it
                if sequence in self.store:
                    continue
                self.machine.transition(
                    SessionState.RESEND_ROUND,
                    "resend_requested",
                    target_sequence=sequence,
                    context={"resend_pass": passes}
                )
                self._resend_round(sequence)

        self.machine.transition(
            SessionState.CLOSED_COMPLETE,
            "gap_check",
            context={"packets": len(self.store), "resend_passes": passes}
        )
        return self._finalize()

    def _initial_round(self) -> None:
        """Connect, request the full stream and drain it."""
        transport = self.transport_factory()
        self.rounds += 1
        try:
            transport.connect(self.config.transport.host, self.config.transport.port)
            self.logger.info("Connected to server", endpoint=transport.endpoint)
            self.machine.transition(SessionState.REQUESTING, "connected")

            transport.write(Request.stream_all().to_bytes())
            self.machine.transition(SessionState.STREAMING_INITIAL, "request_sent")

            self._drain(transport)
        finally:
            transport.close()

    def _resend_round(self, sequence: int) -> None:
        """Request a single sequence on a fresh connection and drain the reply."""
        request = Request.resend(sequence)
        if request.truncated:
            self.logger.warning(
                "Resend sequence truncated to 8 bits on the wire",
                sequence=sequence,
                wire_seq=request.wire_seq
            )

        transport = self.transport_factory()
        self.rounds += 1
        try:
            transport.connect(self.config.transport.host, self.config.transport.port)
            transport.write(request.to_bytes())
            self.stats.resend_requests += 1
            self.logger.info("Resend requested", sequence=sequence)
            self._drain(transport)
        except TransportError as e:
            # the sequence stays missing and is retried on the next pass
            self.stats.transport_errors += 1
            self.logger.warning(
                "Resend round abandoned",
                sequence=sequence,
                operation=e.operation,
                error=str(e)
            )
        finally:
            transport.close()

    def _drain(self, transport: Transport) -> None:
        """Feed every received chunk through framing, validation and the store."""
        decoder = FrameDecoder(self.config.protocol.frame_length)
        stored_before = len(self.store)
        try:
            for frame in iter_frames(self._counted(transport.chunks()), decoder=decoder):
                self._ingest(frame)
        finally:
            self.stats.frames_decoded += decoder.frames_decoded
            if decoder.bytes_discarded:
                self.stats.partial_bytes_discarded += decoder.bytes_discarded
                self.logger.debug("Partial frame discarded at close", bytes=decoder.bytes_discarded)

        self.logger.info(
            "Connection closed",
            inserted=len(self.store) - stored_before,
            stored=len(self.store)
        )

    def _counted(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            self.stats.chunks_received += 1
            self.stats.bytes_received += len(chunk)
            yield chunk

    def _ingest(self, frame: bytes) -> None:
        try:
            packet = self.validator.validate(frame)
        except MalformedPacketError as e:
            self.logger.warning(
                "Malformed packet discarded",
                field=e.field,
                value=e.value,
                error=str(e)
            )
            if self.on_discard is not None:
                self.on_discard(frame, e)
            return

        if self.store.insert(packet):
            self.logger.debug("Received packet", sequence=packet.sequence, symbol=packet.symbol)

    def _finalize(self) -> SessionResult:
        """Run the integrity check and hand the dataset to the sink."""
        packets = self.store.export_sorted()

        try:
            verify_integrity(packets, allow_empty=self.config.integrity.allow_empty)
        except IntegrityViolationError as e:
            return self._fail(FailureReason.INTEGRITY_VIOLATION, e)

        try:
            delivery = self.sink.export(packets)
        except PersistenceError as e:
            return self._fail(FailureReason.PERSISTENCE_ERROR, e)

        self.machine.transition(
            SessionState.SUCCEEDED,
            "exported",
            context={"records": delivery.record_count, "target": delivery.target}
        )
        self.logger.info(
            "All packets received and saved",
            packets=len(packets),
            rounds=self.rounds,
            malformed_discarded=self.validator.metrics.malformed_packets
        )
        return self._result(True, FailureReason.COMPLETE, packets=packets, missing=[])

    def _fail(
        self,
        reason: FailureReason,
        error: Exception,
        missing: Optional[list[int]] = None
    ) -> SessionResult:
        self.machine.transition(SessionState.FAILED, reason.value, context={"error": str(error)})
        self.logger.error("Session failed", reason=reason.value, error=str(error))
        if missing is None:
            missing = self.store.missing_sequences(limit=self.config.resend.max_gap)
        return self._result(False, reason, packets=[], missing=missing, error=error)

    def _result(self, success: bool, reason: FailureReason, **fields) -> SessionResult:
        # per-packet counts live with the component that produces them
        self.stats.packets_inserted = len(self.store)
        self.stats.duplicates = self.store.duplicates
        self.stats.malformed_discarded = self.validator.metrics.malformed_packets
        return SessionResult(
            success=success,
            state=self.machine.state,
            reason=reason,
            rounds=self.rounds,
            stats=self.stats,
            validation=self.validator.metrics.get_stats(),
            **fields
        )

    def _default_transport(self) -> Transport:
        params = self.config.transport
        return TcpTransport(
            connect_timeout_s=params.connect_timeout_s,
            read_timeout_s=params.read_timeout_s,
            chunk_size=params.chunk_size,
        )


def run_session(config: Optional[ClientConfig] = None, **kwargs) -> SessionResult:
    """Create a controller and run it once."""
    return SessionController(config, **kwargs).run()
