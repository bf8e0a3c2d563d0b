"""Connection status store, a small state machine fed by transport events.

    Starting ──qr──▶ AwaitingScan ──open──▶ Connected
        │                 │                    │
        └──────close──────┴───────close────────┴──▶ Disconnected ──(delay)──▶ reconnect
                                                   └─ logout ──▶ FatalError (terminal)

The store never initiates a transition itself; the only action it takes
is the delayed reconnect it schedules after a recoverable close.
"""

import asyncio
import base64
import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import qrcode

from . import persona
from .transport.base import LifecycleEvent, LifecycleKind

logger = logging.getLogger("jinoca.status")


class ConnectionPhase(str, Enum):
    STARTING = "starting"
    AWAITING_SCAN = "awaiting_scan"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    FATAL_ERROR = "fatal_error"


@dataclass(frozen=True)
class ConnectionStatus:
    phase: ConnectionPhase
    qr: Optional[str]
    message: str

    @property
    def is_authenticated(self) -> bool:
        return self.phase is ConnectionPhase.CONNECTED

    def to_dict(self) -> dict:
        return {
            "status": self.message,
            "qr": self.qr,
            "isAuthenticated": self.is_authenticated,
            "phase": self.phase.value,
        }


def encode_qr(data: str) -> str:
    """Render a QR challenge as a PNG data URL for the status page."""
    qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_L, box_size=8, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


class StatusStore:
    """Holds the current ConnectionStatus and applies lifecycle events.

    Single writer (the transport event loop), many readers (status page).
    Everything runs on one asyncio loop, so no locking.
    """

    def __init__(
        self,
        reconnect: Optional[Callable[[], Awaitable[None]]] = None,
        reconnect_delay: float = 5.0,
        qr_encoder: Callable[[str], str] = encode_qr,
    ):
        self._reconnect = reconnect
        self.reconnect_delay = reconnect_delay
        self._qr_encoder = qr_encoder
        self._status = ConnectionStatus(ConnectionPhase.STARTING, None, persona.STATUS_STARTING)
        self._reconnect_task: Optional[asyncio.Task] = None

    # ── Reading ──────────────────────────────────────────────

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def phase(self) -> ConnectionPhase:
        return self._status.phase

    @property
    def pending_reconnect(self) -> Optional[asyncio.Task]:
        task = self._reconnect_task
        return task if task and not task.done() else None

    # ── Transitions ──────────────────────────────────────────

    def _set(self, phase: ConnectionPhase, message: str, qr: Optional[str] = None):
        previous = self._status.phase
        self._status = ConnectionStatus(phase, qr, message)
        if previous is not phase:
            logger.info(f"Connection: {previous.value} → {phase.value} ({message})")

    def apply(self, event: LifecycleEvent) -> ConnectionPhase:
        """Apply one transport lifecycle event and return the new phase."""
        if self._status.phase is ConnectionPhase.FATAL_ERROR:
            logger.warning(f"Ignoring {event.kind.value} event: connection is in a fatal state")
            return self._status.phase

        if event.kind is LifecycleKind.QR:
            self.on_qr(event.qr or "")
        elif event.kind is LifecycleKind.OPEN:
            self.on_open()
        elif event.kind is LifecycleKind.CLOSE:
            self.on_close(event.reason, logged_out=event.logged_out)
        elif event.kind is LifecycleKind.FAILED:
            self.on_start_failed(RuntimeError(event.reason or "transport failed"))
        return self._status.phase

    def on_qr(self, qr: str):
        logger.info("QR challenge received, waiting for scan.")
        try:
            encoded = self._qr_encoder(qr) if qr else None
        except Exception as e:
            logger.error(f"Failed to encode QR code: {e}", exc_info=True)
            encoded = None
        self._set(ConnectionPhase.AWAITING_SCAN, persona.STATUS_AWAITING_SCAN, qr=encoded)

    def on_open(self):
        self._cancel_reconnect()
        self._set(ConnectionPhase.CONNECTED, persona.STATUS_CONNECTED)

    def on_close(self, reason: Optional[str] = None, logged_out: bool = False):
        if logged_out:
            logger.error(f"WhatsApp session logged out ({reason}). Re-pairing required; not reconnecting.")
            self._cancel_reconnect()
            self._set(ConnectionPhase.FATAL_ERROR, persona.STATUS_LOGGED_OUT)
            return

        logger.warning(f"WhatsApp disconnected ({reason}). Reconnecting in {self.reconnect_delay:g}s.")
        self._set(ConnectionPhase.DISCONNECTED, persona.STATUS_DISCONNECTED)
        self._schedule_reconnect()

    def on_start_failed(self, error: BaseException):
        """The transport could not be launched at all; no retry."""
        logger.error(f"Transport failed to start: {error}")
        self._cancel_reconnect()
        self._set(ConnectionPhase.FATAL_ERROR, persona.STATUS_FATAL)

    # ── Reconnect ────────────────────────────────────────────

    def _schedule_reconnect(self):
        if self._reconnect is None:
            logger.debug("No reconnect action configured.")
            return
        if self.pending_reconnect:
            logger.debug("Reconnect already scheduled.")
            return
        self._reconnect_task = asyncio.create_task(self._reconnect_after_delay())

    async def _reconnect_after_delay(self):
        await asyncio.sleep(self.reconnect_delay)
        if self._status.phase is not ConnectionPhase.DISCONNECTED:
            return
        logger.info("Reconnecting to WhatsApp...")
        try:
            await self._reconnect()
        except Exception as e:
            logger.error(f"Reconnect failed: {e}", exc_info=True)
            self._set(ConnectionPhase.FATAL_ERROR, persona.STATUS_FATAL)

    def _cancel_reconnect(self):
        task = self.pending_reconnect
        # Never cancel from inside the reconnect task itself
        if task and task is not asyncio.current_task():
            task.cancel()
        self._reconnect_task = None

    async def close(self):
        """Cancel any pending reconnect (shutdown)."""
        task = self.pending_reconnect
        self._reconnect_task = None
        if task and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
