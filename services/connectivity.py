# services/connectivity.py
import asyncio
import logging

import requests

import settings
from services.sync_offline import Connectivity

logger = logging.getLogger(__name__)


class ConnectivityMonitor:
    """
    Polls a probe URL and forwards Online/Offline to the sync manager.
    Any HTTP answer counts as online; only transport errors count as offline.
    """

    def __init__(self, manager, probe_url: str = settings.PROBE_URL,
                 interval: float = settings.PROBE_INTERVAL, timeout: float = 5.0):
        self.manager = manager
        self.probe_url = probe_url
        self.interval = interval
        self.timeout = timeout
        self._running = False

    def probe(self) -> bool:
        try:
            requests.head(self.probe_url, timeout=self.timeout)
            return True
        except requests.RequestException as e:
            logger.debug("Probe %s failed: %s", self.probe_url, e)
            return False

    async def check_once(self) -> bool:
        online = await asyncio.to_thread(self.probe)
        self.manager.notify_connectivity_changed(
            Connectivity.ONLINE if online else Connectivity.OFFLINE
        )
        return online

    async def tick(self) -> bool:
        """
        One probe. While the device stays online, also retries whatever is
        still queued; a fresh Offline -> Online transition already started
        its own pass.
        """
        was_online = self.manager.online
        online = await self.check_once()
        if online and was_online:
            await self.manager.sync_pass()
        return online

    async def run(self):
        self._running = True
        logger.info("Connectivity monitor started (%s every %.0fs)", self.probe_url, self.interval)
        while self._running:
            try:
                await self.tick()
            except Exception:
                logger.exception("Connectivity check failed")
            await asyncio.sleep(self.interval)

    def stop(self):
        self._running = False
