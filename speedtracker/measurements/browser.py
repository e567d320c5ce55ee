"""Browser automation for the OpenSpeedTest page.

The measurement driver only talks to :class:`BrowserSession` and
:class:`SpeedtestPage`. The Selenium/Chrome implementation below is the production
backend; tests substitute in-memory doubles.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from ..config import SpeedtestConfig
from .errors import (
    BrowserLaunchError,
    NavigationTimeout,
    ResultParseError,
    ResultTimeout,
    StartControlMissing,
)
from .models import PageReading, parse_reading

LOGGER = logging.getLogger(__name__)

READ_RESULTS_SCRIPT = """
const read = (id) => {
    const el = document.getElementById(id);
    return el ? el.textContent.trim() : null;
};
return {
    download: read(arguments[0]),
    upload: read(arguments[1]),
    ping: read(arguments[2]),
    jitter: read(arguments[3])
};
"""

CLICK_SCRIPT = (
    "arguments[0].dispatchEvent(new MouseEvent('click', "
    "{bubbles: true, cancelable: true, view: window}));"
)


class SpeedtestPage:
    """One isolated page running a single speed test."""

    def open(self) -> None:
        raise NotImplementedError

    def start_test(self) -> None:
        raise NotImplementedError

    def poll_for_result(self, timeout: float) -> PageReading:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


class BrowserSession:
    def new_page(self) -> SpeedtestPage:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError


def reading_from_texts(texts: Dict[str, Optional[str]]) -> Optional[PageReading]:
    """Build a reading once download and upload both show numbers."""

    download = parse_reading(texts.get("download"))
    upload = parse_reading(texts.get("upload"))
    if download is None or upload is None:
        return None
    return PageReading(
        download=download,
        upload=upload,
        ping=parse_reading(texts.get("ping")),
        jitter=parse_reading(texts.get("jitter")),
    )


class SeleniumSpeedtestPage(SpeedtestPage):
    def __init__(self, driver: webdriver.Chrome, config: SpeedtestConfig, home_handle: str):
        self.driver = driver
        self.config = config
        self.home_handle = home_handle
        self.driver.switch_to.new_window("tab")
        # delete_all_cookies only covers the current document, which is about:blank here
        self.driver.execute_cdp_cmd("Network.clearBrowserCookies", {})

    def open(self) -> None:
        self.driver.set_page_load_timeout(self.config.navigation_timeout)
        try:
            self.driver.get(self.config.url)
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"{self.config.url} did not load within {self.config.navigation_timeout}s"
            ) from exc

    def start_test(self) -> None:
        locator = (By.ID, self.config.start_button_id)
        try:
            button = WebDriverWait(self.driver, self.config.start_timeout).until(
                EC.visibility_of_element_located(locator)
            )
        except TimeoutException as exc:
            raise StartControlMissing(
                f"start control #{self.config.start_button_id} not visible within "
                f"{self.config.start_timeout}s"
            ) from exc
        self.driver.execute_script(CLICK_SCRIPT, button)

    def _read_texts(self) -> Dict[str, Optional[str]]:
        texts = self.driver.execute_script(
            READ_RESULTS_SCRIPT,
            self.config.download_id,
            self.config.upload_id,
            self.config.ping_id,
            self.config.jitter_id,
        )
        if not isinstance(texts, dict):
            raise ResultParseError(f"unexpected result payload from page: {texts!r}")
        return texts

    def poll_for_result(self, timeout: float) -> PageReading:
        wait = WebDriverWait(self.driver, timeout, poll_frequency=self.config.poll_interval)
        try:
            return wait.until(lambda _driver: reading_from_texts(self._read_texts()))
        except TimeoutException as exc:
            raise ResultTimeout(f"results did not appear within {timeout}s") from exc

    def close(self) -> None:
        try:
            self.driver.close()
            self.driver.switch_to.window(self.home_handle)
        except WebDriverException as exc:
            LOGGER.warning("Failed to close browser tab: %s", exc)


class SeleniumBrowserSession(BrowserSession):
    def __init__(self, driver: webdriver.Chrome, config: SpeedtestConfig):
        self.driver = driver
        self.config = config
        self.home_handle = driver.current_window_handle

    def new_page(self) -> SpeedtestPage:
        return SeleniumSpeedtestPage(self.driver, self.config, self.home_handle)

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as exc:
            LOGGER.warning("Failed to shut down browser cleanly: %s", exc)


def build_chrome_options(config: SpeedtestConfig) -> Options:
    options = Options()
    if config.headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-setuid-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument(f"--window-size={config.window_size}")
    options.add_argument(f"--user-agent={config.user_agent}")
    # return from get() once the DOM is interactive
    options.page_load_strategy = "eager"
    return options


def launch_chrome(config: SpeedtestConfig) -> BrowserSession:
    LOGGER.debug("Launching Chrome (headless=%s)", config.headless)
    try:
        driver = webdriver.Chrome(options=build_chrome_options(config))
    except WebDriverException as exc:
        raise BrowserLaunchError(f"Unable to launch Chrome: {exc.msg or exc}") from exc
    return SeleniumBrowserSession(driver, config)
