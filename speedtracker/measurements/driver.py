"""Runs speed tests in a browser and turns page readings into measurements."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..config import AppConfig
from .browser import BrowserSession, launch_chrome
from .errors import MeasurementError
from .models import MeasurementResult, SignalReading, format_timestamp
from .signal_reader import SignalReader

LOGGER = logging.getLogger(__name__)

BrowserFactory = Callable[[], BrowserSession]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MeasurementDriver:
    def __init__(
        self,
        config: AppConfig,
        signal_reader: Optional[SignalReader] = None,
        browser_factory: Optional[BrowserFactory] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.signal_reader = signal_reader
        self.browser_factory = browser_factory or (lambda: launch_chrome(config.speedtest))
        self._sleep = sleep
        self._clock = clock

    def run_measurements(self, count: int = 1) -> List[MeasurementResult]:
        """Run ``count`` sequential tests and return the successful ones.

        Raises :class:`BrowserLaunchError` if no browser can be started; every other
        failure only costs the iteration it happened in.
        """

        if count < 1:
            raise ValueError("count must be at least 1")

        browser = self.browser_factory()
        results: List[MeasurementResult] = []
        try:
            with ThreadPoolExecutor(max_workers=1, thread_name_prefix="signal") as executor:
                for index in range(count):
                    LOGGER.info("Starting test %d of %d...", index + 1, count)
                    result = self._run_iteration(browser, executor, index)
                    if result is not None:
                        results.append(result)
                    if index < count - 1:
                        self._sleep(self.config.speedtest.cooldown)
        finally:
            browser.close()
        return results

    def _run_iteration(
        self, browser: BrowserSession, executor: ThreadPoolExecutor, index: int
    ) -> Optional[MeasurementResult]:
        signal_future = executor.submit(self.signal_reader.read) if self.signal_reader else None
        page = None
        try:
            page = browser.new_page()
            page.open()
            page.start_test()
            reading = page.poll_for_result(self.config.speedtest.result_timeout)
            signal = self._join_signal(signal_future)
            signal_future = None
            result = MeasurementResult(
                timestamp=format_timestamp(self._clock()),
                download=reading.download,
                upload=reading.upload,
                ping=reading.ping,
                jitter=reading.jitter,
                sinr4g=signal.sinr4g if signal else None,
                sinr5g=signal.sinr5g if signal else None,
            )
            LOGGER.info(
                "Test %d results: down %.2f Mbps / up %.2f Mbps / ping %s ms / jitter %s ms",
                index + 1,
                result.download,
                result.upload,
                result.ping,
                result.jitter,
            )
            return result
        except MeasurementError as exc:
            LOGGER.error("Test %d failed: %s", index + 1, exc)
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.exception("Test %d failed unexpectedly: %s", index + 1, exc)
        finally:
            if page is not None:
                page.close()
            if signal_future is not None:
                self._settle_signal(signal_future)
        return None

    def _settle_signal(self, future: Future) -> None:
        """Cancel a read the failed iteration no longer needs, or wait for it to finish."""

        if future.cancel():
            return
        self._join_signal(future)

    def _join_signal(self, future: Optional[Future]) -> Optional[SignalReading]:
        if future is None:
            return None
        try:
            return future.result(timeout=self.config.signal.timeout)
        except FutureTimeoutError:
            LOGGER.warning("Signal reading did not finish within %ss", self.config.signal.timeout)
        except Exception as exc:  # pylint: disable=broad-except
            LOGGER.warning("Signal reading failed: %s", exc)
        return None
