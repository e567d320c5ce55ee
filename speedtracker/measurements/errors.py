"""Exceptions raised while driving a speed test."""

from __future__ import annotations


class MeasurementError(RuntimeError):
    """A single test iteration failed; the batch carries on."""


class NavigationTimeout(MeasurementError):
    pass


class StartControlMissing(MeasurementError):
    pass


class ResultTimeout(MeasurementError):
    pass


class ResultParseError(MeasurementError):
    pass


class BrowserLaunchError(RuntimeError):
    """The browser could not be started at all."""
