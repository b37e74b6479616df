"""
Pytest configuration for stack_safe tests.

Provides a parameterized fixture to run the same generator-based
computations on both the plain driver and the tail-call driver.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pytest

from stack_safe import Call, DriveStats, drive, drive_tco


@dataclass(frozen=True)
class DriverVariant:
    """
    A driver together with the way computations request sub-calls on it.

    ``drive`` takes bare arguments, ``drive_tco`` takes ``Call.normal``
    markers; ``request(arg)`` produces the right one.
    """

    name: str
    run: Callable[..., Any]
    request: Callable[[Any], Any]

    def __call__(self, arg: Any, make: Callable[[Any], Any], stats: DriveStats | None = None) -> Any:
        return self.run(arg, make, stats=stats)


def _bare(arg: Any) -> Any:
    return arg


@pytest.fixture(params=["drive", "drive_tco"])
def driver(request: pytest.FixtureRequest) -> DriverVariant:
    """
    Parameterized fixture providing both non-threaded drivers.

    Tests written against ``driver.request`` behave identically on both.
    """
    if request.param == "drive":
        return DriverVariant("drive", drive, _bare)
    return DriverVariant("drive_tco", drive_tco, Call.normal)


@pytest.fixture
def stats() -> DriveStats:
    return DriveStats()
