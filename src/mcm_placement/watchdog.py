"""Cluster registry readiness watchdog.

The cluster registry may be installed after this process starts. Rather than
re-registering capabilities at runtime, the watchdog polls the registry and,
once it becomes available, hands control to an ``on_ready`` policy. The
default policy exits the process so that its supervisor restarts it with
registry support enabled.

Usage:
    watchdog = ClusterRegistryWatchdog(registry)
    task = await watchdog.start(stop_event)
    # task is None when the registry was already available
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcm_placement.registry import ClusterReader

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0


class WatchdogState(str, Enum):
    """Readiness of the cluster registry as seen by the watchdog."""

    NOT_READY = "NotReady"
    READY = "Ready"


def is_cluster_registry_ready(reader: ClusterReader) -> bool:
    """Probe the registry with an unfiltered list.

    Any error, including not-found, counts as not ready.
    """
    try:
        reader.list_clusters()
    except Exception as e:
        logger.info(f"Cluster registry NOT ready: {e}")
        return False

    logger.info("Cluster registry ready")
    return True


def exit_for_restart(status: int = 1) -> None:
    """Terminate the process immediately so the supervisor restarts it."""
    logger.warning(f"Cluster registry is now available, exiting with status {status} to restart")
    logging.shutdown()
    os._exit(status)


class ClusterRegistryWatchdog:
    """Polls the cluster registry until it is ready, then calls ``on_ready`` once.

    The registry is probed once when started. If it is already available
    nothing else happens. Otherwise a background task re-probes every
    ``poll_interval`` seconds until a probe succeeds or ``stop`` is set.
    The first re-probe comes one ``poll_interval`` after the failed startup
    probe, not immediately.
    """

    def __init__(
        self,
        reader: ClusterReader,
        on_ready: Callable[[], Any] = exit_for_restart,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self._reader = reader
        self._on_ready = on_ready
        self._poll_interval = poll_interval
        self._state = WatchdogState.NOT_READY
        self._ready = asyncio.Event()
        self._stop: asyncio.Event | None = None
        self._task: asyncio.Task[bool] | None = None

    @property
    def state(self) -> WatchdogState:
        return self._state

    @property
    def ready(self) -> asyncio.Event:
        """Event set once the registry has been seen ready."""
        return self._ready

    @property
    def task(self) -> asyncio.Task[bool] | None:
        """The polling task, if polling was needed."""
        return self._task

    async def _probe(self) -> bool:
        # The Kubernetes client blocks; keep it off the event loop
        return await asyncio.to_thread(is_cluster_registry_ready, self._reader)

    async def start(self, stop: asyncio.Event | None = None) -> asyncio.Task[bool] | None:
        """Probe the registry and start polling if it is not ready.

        Args:
            stop: Event that ends polling when set.

        Returns:
            The polling task, or None if the registry was already ready.
            The task result is True if ``on_ready`` was called and False if
            polling was stopped first.
        """
        if self._stop is not None:
            raise RuntimeError("Watchdog already started")
        self._stop = stop if stop is not None else asyncio.Event()

        if await self._probe():
            self._state = WatchdogState.READY
            self._ready.set()
            logger.debug("Cluster registry available at startup, not polling")
            return None

        logger.info(f"Polling cluster registry every {self._poll_interval}s")
        self._task = asyncio.create_task(
            self._poll(self._stop), name="cluster-registry-watchdog"
        )
        return self._task

    def stop(self) -> None:
        """Stop polling; no further probes are made."""
        if self._stop is not None:
            self._stop.set()

    async def _poll(self, stop: asyncio.Event) -> bool:
        try:
            while True:
                try:
                    await asyncio.wait_for(stop.wait(), timeout=self._poll_interval)
                except asyncio.TimeoutError:
                    pass
                else:
                    logger.info("Cluster registry watchdog stopped")
                    return False

                ready = await self._probe()
                if stop.is_set():
                    logger.info("Cluster registry watchdog stopped")
                    return False
                if ready:
                    self._state = WatchdogState.READY
                    self._ready.set()
                    self._on_ready()
                    return True
        except asyncio.CancelledError:
            logger.info("Cluster registry watchdog cancelled")
            raise


async def detect_cluster_registry(
    reader: ClusterReader,
    stop: asyncio.Event | None = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    on_ready: Callable[[], Any] = exit_for_restart,
) -> asyncio.Task[bool] | None:
    """Start a readiness watchdog for ``reader``.

    Returns:
        The polling task, or None if the registry was already ready.
    """
    watchdog = ClusterRegistryWatchdog(reader, on_ready=on_ready, poll_interval=poll_interval)
    return await watchdog.start(stop)
