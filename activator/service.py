"""
Activator Service

Wires the node together and serializes all work through one dispatcher:

    transport callback --NotificationEvent--\\
    control timer      --TickEvent----------->  queue  ->  dispatcher
    command server     --CommandEvent-------/

The dispatcher handles one event at a time, so the history, threshold and
signal sample are only ever touched by one piece of code at a time.
"""

import asyncio
import signal
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from activator.common.config import ActivatorConfig, SignalSettings, SignalSourceType
from activator.common.exceptions import ConfigError, ServiceError
from activator.common.logging_setup import get_service_logger
from activator.common.scheduler import AdaptiveLoop
from activator.services.command.server import CommandServer
from activator.services.control.loop import ControlLoop
from activator.services.control.state import ActivatorContext
from activator.services.control.threshold import ThresholdStore
from activator.services.device.actuator import Actuator, LedActuator
from activator.services.device.signal import SignalSource, SimulatedRadioSignal, StaticSignal
from activator.services.observe.history import HistoryBuffer
from activator.services.observe.session import ObservationSession
from activator.services.observe.transport import (
    HttpObserveTransport,
    Notification,
    NotificationTransport,
    SubscriptionHandle,
)

logger = get_service_logger("service")


@dataclass
class NotificationEvent:
    handle: SubscriptionHandle
    notification: Notification


@dataclass
class TickEvent:
    done: asyncio.Future = field(repr=False)


@dataclass
class CommandEvent:
    action: str
    argument: Any = None
    done: asyncio.Future | None = field(default=None, repr=False)


def build_signal_source(settings: SignalSettings) -> SignalSource:
    if settings.source == SignalSourceType.STATIC:
        return StaticSignal(settings.static_value)
    try:
        return SimulatedRadioSignal(
            start=settings.static_value,
            floor=settings.floor,
            ceiling=settings.ceiling,
            seed=settings.seed,
        )
    except ValueError as e:
        raise ConfigError(f"Invalid simulated signal settings: {e}")


class ActivatorService:
    """
    Fan activator node.

    1. Observe the peer's temperature resource
    2. Keep the rolling history and signal sample
    3. Run the adaptive control loop against the actuator
    4. Serve threshold writes and the observation toggle
    """

    COMMANDS = (
        "set_threshold",
        "get_threshold",
        "subscribe",
        "unsubscribe",
        "toggle_observation",
        "snapshot",
    )

    def __init__(
        self,
        config: ActivatorConfig | None = None,
        transport: NotificationTransport | None = None,
        actuator: Actuator | None = None,
        signal_source: SignalSource | None = None,
    ):
        self.config = config or ActivatorConfig()
        cfg = self.config

        self.context = ActivatorContext(
            history=HistoryBuffer(cfg.history.capacity),
            threshold=ThresholdStore(cfg.control.default_threshold),
        )
        self.transport = transport or HttpObserveTransport(
            poll_interval_s=cfg.observe.poll_interval_s,
            request_timeout_s=cfg.observe.request_timeout_s,
            max_retries=cfg.observe.max_retries,
        )
        self.actuator = actuator or LedActuator()
        self.signal_source = signal_source or build_signal_source(cfg.signal)

        self.session = ObservationSession(
            self.transport,
            self.context,
            self.signal_source,
            calibration_offset=cfg.signal.calibration_offset,
            deliver=self._enqueue_notification,
        )
        self.control = ControlLoop(self.context, self.actuator, cfg.control)

        self.command_server: CommandServer | None = None
        if cfg.command.enabled:
            self.command_server = CommandServer(self, cfg.command.host, cfg.command.port)

        self._queue: asyncio.Queue = asyncio.Queue()
        self._control_timer = AdaptiveLoop(self.control.period, self._on_control_timer, "control")
        self._toggle_timer: AdaptiveLoop | None = None
        if cfg.observe.toggle_interval_s > 0:
            self._toggle_timer = AdaptiveLoop(
                cfg.observe.toggle_interval_s, self._on_toggle_timer, "observe-toggle"
            )

        self._running = False
        self._dispatch_task: asyncio.Task | None = None
        self._shutdown_event = asyncio.Event()
        self._start_time = datetime.now(timezone.utc)
        self.events_handled = 0
        self.event_errors = 0

    @property
    def running(self) -> bool:
        return self._running

    async def start(self, wait: bool = True) -> None:
        """
        Start the node.

        With wait=True (the default) this blocks until SIGTERM/SIGINT or
        request_shutdown(); call stop() afterwards.
        """
        if self._running:
            return

        logger.info(f"Starting fan activator {self.config.node_id}")
        self._running = True
        self._start_time = datetime.now(timezone.utc)

        self._dispatch_task = asyncio.create_task(self._dispatch_loop())

        if self.command_server:
            await self.command_server.start()

        if self.config.observe.auto_subscribe:
            await self.submit("subscribe")

        await self._control_timer.start()
        if self._toggle_timer:
            await self._toggle_timer.start()

        logger.info(
            f"Fan activator started (observing {self.config.observe_url}, "
            f"threshold {self.context.threshold.get()})",
            extra={
                "observe_url": self.config.observe_url,
                "threshold": self.context.threshold.get(),
            },
        )

        if wait:
            self._setup_signal_handlers()
            await self._shutdown_event.wait()

    async def stop(self) -> None:
        """Stop the node"""
        if not self._running:
            return

        logger.info("Stopping fan activator")
        self._running = False

        self._control_timer.stop()
        if self._toggle_timer:
            self._toggle_timer.stop()

        if self._dispatch_task:
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None

        self.session.unsubscribe()
        await self.transport.close()

        if self.command_server:
            await self.command_server.stop()

        logger.info("Fan activator stopped")

    def request_shutdown(self) -> None:
        self._shutdown_event.set()

    def _setup_signal_handlers(self) -> None:
        """Setup graceful shutdown signal handlers"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._handle_shutdown)
            except NotImplementedError:
                signal.signal(sig, lambda s, f: self._handle_shutdown())

    def _handle_shutdown(self) -> None:
        logger.info("Received shutdown signal")
        self.request_shutdown()

    # ── Event sources ────────────────────────────────────────────────

    def _enqueue_notification(self, handle: SubscriptionHandle, notification: Notification) -> None:
        self._queue.put_nowait(NotificationEvent(handle, notification))

    async def submit(self, action: str, argument: Any = None) -> Any:
        """Queue a command for the dispatcher and wait for its result"""
        if action not in self.COMMANDS:
            raise ServiceError(f"Unknown command: {action}", "service")
        if not self._running:
            raise ServiceError("Service is not running", "service")

        done = asyncio.get_running_loop().create_future()
        await self._queue.put(CommandEvent(action, argument, done))
        return await done

    async def _on_control_timer(self) -> float:
        done = asyncio.get_running_loop().create_future()
        await self._queue.put(TickEvent(done))
        return await done

    async def _on_toggle_timer(self) -> None:
        logger.info("Toggle timer elapsed")
        await self.submit("toggle_observation")

    async def drain(self) -> None:
        """Wait until every queued event has been handled"""
        await self._queue.join()

    # ── Dispatcher ───────────────────────────────────────────────────

    async def _dispatch_loop(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                self._handle_event(event)
                self.events_handled += 1
            except Exception as e:
                self.event_errors += 1
                done = getattr(event, "done", None)
                if done is not None and not done.done():
                    done.set_exception(e)
                else:
                    logger.error(f"Error handling {type(event).__name__}: {e}")
            finally:
                self._queue.task_done()

    def _handle_event(self, event: NotificationEvent | TickEvent | CommandEvent) -> None:
        if isinstance(event, NotificationEvent):
            self.session.handle_notification(event.handle, event.notification)
        elif isinstance(event, TickEvent):
            period = self.control.tick()
            if not event.done.done():
                event.done.set_result(period)
        else:
            result = self._run_command(event.action, event.argument)
            if event.done is not None and not event.done.done():
                event.done.set_result(result)

    def _run_command(self, action: str, argument: Any) -> Any:
        observe = self.config.observe

        if action == "set_threshold":
            return self.context.threshold.set(argument)
        if action == "get_threshold":
            return self.context.threshold.get()
        if action == "subscribe":
            return self.session.subscribe(observe.address, observe.port, observe.path)
        if action == "unsubscribe":
            return self.session.unsubscribe()
        if action == "toggle_observation":
            return self.session.toggle(observe.address, observe.port, observe.path).value
        if action == "snapshot":
            return self.snapshot()
        raise ServiceError(f"Unknown command: {action}", "service")

    def snapshot(self) -> dict[str, Any]:
        """Node state for the /state endpoint"""
        uptime = (datetime.now(timezone.utc) - self._start_time).total_seconds()
        actuator = self.actuator.to_dict() if hasattr(self.actuator, "to_dict") else None

        return {
            "node_id": self.config.node_id,
            "running": self._running,
            "uptime": int(uptime),
            "observation": self.session.to_dict(),
            "control": self.control.state.to_dict(),
            "context": self.context.to_dict(),
            "actuator": actuator,
            "timers": {
                "control": self._control_timer.get_stats(),
                "toggle": self._toggle_timer.get_stats() if self._toggle_timer else None,
            },
            "events_handled": self.events_handled,
            "event_errors": self.event_errors,
        }
