"""WhatsApp transport over a whatsapp-web.js bridge subprocess.

The Node bridge (bridge_script.py) owns the browser session. We talk to it
over stdio, one JSON object per line:

    stdout ▶ {"type": "qr" | "ready" | "disconnected" | "auth_failure" |
              "fatal" | "message" | "result", ...}
    stdin  ◀ {"cmd": "send_text" | "send_image" | "presence" | "history",
              "id": "<correlation id>", ...}

Every command is answered by a `result` line carrying the same id.
"""

import asyncio
import base64
import json
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import AsyncIterator, Optional

from ..abilities.image_gen import GeneratedImage
from .base import (
    HistoryMessage,
    InboundMessage,
    LifecycleEvent,
    Presence,
    Transport,
    TransportError,
)
from .bridge_script import BRIDGE_PACKAGE_JSON, BRIDGE_SCRIPT

logger = logging.getLogger("jinoca.whatsapp")

_SCRIPT_NAME = "bridge.js"
_STREAM_LIMIT = 16 * 1024 * 1024  # history replies can be large


class WhatsAppBridge(Transport):
    """Transport backed by a whatsapp-web.js Node subprocess."""

    def __init__(
        self,
        command: str = "node",
        bridge_dir: str = "~/.jinoca/bridge",
        chrome_path: Optional[str] = None,
        command_timeout: float = 60.0,
        stop_timeout: float = 5.0,
    ):
        self.command = command
        self.bridge_dir = Path(os.path.expanduser(bridge_dir))
        self.chrome_path = chrome_path
        self.command_timeout = command_timeout
        self.stop_timeout = stop_timeout
        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._pending: dict[str, asyncio.Future] = {}
        self._messages: asyncio.Queue = asyncio.Queue()
        self._events: asyncio.Queue = asyncio.Queue()
        self._write_lock = asyncio.Lock()
        self._stopping = False
        self._failed = False

    # ── Setup ───────────────────────────────────────────────────

    def write_script(self) -> Path:
        """Write bridge.js and package.json into the bridge directory."""
        self.bridge_dir.mkdir(parents=True, exist_ok=True)
        script_path = self.bridge_dir / _SCRIPT_NAME
        for path, content in ((script_path, BRIDGE_SCRIPT), (self.bridge_dir / "package.json", BRIDGE_PACKAGE_JSON)):
            if not path.exists() or path.read_text(encoding="utf-8") != content:
                path.write_text(content, encoding="utf-8")
        return script_path

    async def ensure_dependencies(self) -> tuple[bool, str]:
        """Install whatsapp-web.js next to the script if it is missing."""
        if not shutil.which(self.command):
            return False, f"'{self.command}' not found in PATH. Install Node.js 18+."
        if (self.bridge_dir / "node_modules" / "whatsapp-web.js").is_dir():
            return True, ""

        npm = shutil.which("npm")
        if not npm:
            return False, "whatsapp-web.js is not installed and npm is not available."

        logger.info(f"Installing whatsapp-web.js in {self.bridge_dir} ...")
        proc = await asyncio.create_subprocess_exec(
            npm, "install", "--omit=dev", "--no-audit", "--no-fund",
            cwd=str(self.bridge_dir),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(proc.communicate(), timeout=900)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            return False, "npm install timed out after 15 minutes."
        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace") if stderr else ""
            return False, f"npm install failed (rc={proc.returncode}): {err[:200]}"
        return True, "whatsapp-web.js installed"

    # ── Lifecycle ───────────────────────────────────────────────

    async def start(self) -> None:
        script = self.write_script()
        ok, msg = await self.ensure_dependencies()
        if not ok:
            raise TransportError(msg)
        if msg:
            logger.info(msg)

        env = dict(os.environ)
        if self.chrome_path:
            env["PUPPETEER_EXECUTABLE_PATH"] = self.chrome_path

        self._stopping = False
        self._failed = False
        try:
            self._process = await asyncio.create_subprocess_exec(
                self.command, str(script),
                cwd=str(self.bridge_dir),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env,
                limit=_STREAM_LIMIT,
            )
        except OSError as e:
            self._process = None
            raise TransportError(f"Failed to launch WhatsApp bridge: {e}") from e

        self._reader_task = asyncio.create_task(self._read_stdout(self._process))
        self._stderr_task = asyncio.create_task(self._read_stderr(self._process))
        logger.info(f"WhatsApp bridge started (pid={self._process.pid}).")

    async def stop(self) -> None:
        self._stopping = True
        process, self._process = self._process, None

        if process and process.returncode is None:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=self.stop_timeout)
            except (asyncio.TimeoutError, ProcessLookupError):
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()

        for task in (self._reader_task, self._stderr_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reader_task = None
        self._stderr_task = None
        self._fail_pending("WhatsApp bridge stopped")

    # ── Inbound ─────────────────────────────────────────────────

    async def _read_stdout(self, process: asyncio.subprocess.Process):
        while True:
            line = await process.stdout.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace").strip()
            if not text:
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                logger.debug(f"[bridge] non-JSON output: {text[:200]}")
                continue
            try:
                self.handle_payload(payload)
            except Exception as e:
                logger.error(f"[bridge] failed to handle {payload.get('type')}: {e}", exc_info=True)

        self._fail_pending("WhatsApp bridge exited")
        if not self._stopping and not self._failed:
            code = await process.wait()
            logger.warning(f"WhatsApp bridge exited unexpectedly (rc={code}).")
            self._events.put_nowait(LifecycleEvent.closed(f"bridge exited (rc={code})"))

    async def _read_stderr(self, process: asyncio.subprocess.Process):
        while True:
            line = await process.stderr.readline()
            if not line:
                break
            logger.debug(line.decode("utf-8", errors="replace").rstrip())

    def handle_payload(self, payload: dict):
        """Route one decoded bridge line to the right queue or future."""
        kind = payload.get("type")

        if kind == "message":
            message = InboundMessage.from_jids(
                id=str(payload.get("id") or ""),
                sender_id=str(payload.get("from") or ""),
                chat_id=str(payload.get("chatId") or payload.get("from") or ""),
                body=payload.get("body") or "",
                is_from_self=bool(payload.get("fromMe", False)),
                timestamp=float(payload.get("timestamp") or 0),
            )
            self._messages.put_nowait(message)
        elif kind == "result":
            future = self._pending.pop(str(payload.get("id")), None)
            if future and not future.done():
                future.set_result(payload)
        elif kind == "qr":
            self._events.put_nowait(LifecycleEvent.qr_challenge(str(payload.get("qr") or "")))
        elif kind == "ready":
            self._events.put_nowait(LifecycleEvent.opened())
        elif kind == "disconnected":
            self._events.put_nowait(LifecycleEvent.closed(payload.get("reason")))
        elif kind == "auth_failure":
            logger.error(f"WhatsApp authentication failed: {payload.get('message')}")
            self._events.put_nowait(LifecycleEvent.closed("AUTH_FAILURE"))
        elif kind == "fatal":
            self._failed = True
            self._events.put_nowait(LifecycleEvent.failed(str(payload.get("error") or "bridge failed")))
        else:
            logger.debug(f"[bridge] unknown payload type: {kind}")

    async def messages(self) -> AsyncIterator[InboundMessage]:
        while True:
            yield await self._messages.get()

    async def events(self) -> AsyncIterator[LifecycleEvent]:
        while True:
            yield await self._events.get()

    # ── Outbound ────────────────────────────────────────────────

    def _fail_pending(self, reason: str):
        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(TransportError(reason))

    async def _command(self, cmd: str, **fields):
        process = self._process
        if process is None or process.returncode is not None:
            raise TransportError("WhatsApp bridge is not running.")

        request_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        line = json.dumps({"cmd": cmd, "id": request_id, **fields}, ensure_ascii=False) + "\n"

        try:
            async with self._write_lock:
                process.stdin.write(line.encode("utf-8"))
                await process.stdin.drain()
            result = await asyncio.wait_for(future, timeout=self.command_timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"WhatsApp bridge did not answer '{cmd}' within {self.command_timeout:.0f}s") from e
        except (BrokenPipeError, ConnectionResetError) as e:
            raise TransportError(f"WhatsApp bridge pipe closed: {e}") from e
        finally:
            self._pending.pop(request_id, None)

        if not result.get("ok"):
            raise TransportError(f"{cmd} failed: {result.get('error') or 'unknown error'}")
        return result.get("data")

    async def send_text(self, chat_id: str, text: str, quoted_id: Optional[str] = None) -> None:
        await self._command("send_text", chatId=chat_id, text=text, quotedId=quoted_id)

    async def send_image(
        self,
        chat_id: str,
        image: GeneratedImage,
        caption: str = "",
        quoted_id: Optional[str] = None,
    ) -> None:
        await self._command(
            "send_image",
            chatId=chat_id,
            data=base64.b64encode(image.data).decode("ascii"),
            mimeType=image.mime_type,
            caption=caption,
            quotedId=quoted_id,
        )

    async def set_presence(self, chat_id: str, presence: Presence) -> None:
        await self._command("presence", chatId=chat_id, state=presence.value)

    async def fetch_history(self, chat_id: str, limit: int) -> list[HistoryMessage]:
        if limit <= 0:
            return []
        rows = await self._command("history", chatId=chat_id, limit=limit) or []
        history = [
            HistoryMessage(
                id=str(row.get("id") or ""),
                body=row.get("body") or "",
                from_me=bool(row.get("fromMe", False)),
                timestamp=float(row.get("timestamp") or 0),
            )
            for row in rows
        ]
        history.sort(key=lambda h: h.timestamp)
        return history
