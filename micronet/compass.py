"""Tilt-compensated magnetic compass built on an accelerometer and magnetometer."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

HEADING_HISTORY_LENGTH = 4


@dataclass(frozen=True)
class Vector:
    """Three-component vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector) -> Vector:
        return Vector(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def normalized(self) -> Vector:
        """Unit vector of the same direction; raises ValueError for a null vector."""
        norm = math.sqrt(self.dot(self))
        if norm == 0.0:
            raise ValueError("cannot normalize a null vector")
        return Vector(self.x / norm, self.y / norm, self.z / norm)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)


class CompassDriver(ABC):
    """Access to a combined accelerometer and magnetometer chip."""

    @abstractmethod
    def device_name(self) -> str:
        """Name of the detected chip."""

    @abstractmethod
    def magnetic_field(self) -> Vector:
        """Raw magnetic field reading."""

    @abstractmethod
    def acceleration(self) -> Vector:
        """Raw acceleration reading."""


class NavCompass:
    """Computes a smoothed magnetic heading from a compass driver.

    ``driver`` may be None when no chip was detected. ``mag_offset`` is the
    hard-iron calibration subtracted from magnetic readings, and
    ``heading_axis`` the board axis pointing towards the bow.
    """

    def __init__(self, driver: CompassDriver | None = None,
                 mag_offset: Vector | None = None,
                 heading_axis: Vector | None = None) -> None:
        self.driver = driver
        self.mag_offset = mag_offset if mag_offset is not None else Vector()
        self.heading_axis = heading_axis if heading_axis is not None else Vector(1.0, 0.0, 0.0)
        self._history = [0.0] * HEADING_HISTORY_LENGTH
        self._index = 0

    @property
    def detected(self) -> bool:
        return self.driver is not None

    def device_name(self) -> str:
        """Name of the compass chip, or an empty string when none is present."""
        return self.driver.device_name() if self.driver is not None else ""

    def magnetic_field(self) -> Vector | None:
        """Raw magnetic field, or None when no compass is present."""
        return self.driver.magnetic_field() if self.driver is not None else None

    def acceleration(self) -> Vector | None:
        """Raw acceleration, or None when no compass is present."""
        return self.driver.acceleration() if self.driver is not None else None

    def heading(self) -> float:
        """Heading in degrees, averaged over the last readings.

        Raises RuntimeError when no compass is present.
        """
        if self.driver is None:
            raise RuntimeError("no compass detected")

        accel = self.driver.acceleration().normalized()
        mag = (self.driver.magnetic_field() - self.mag_offset).normalized()

        # Down x magnetic field gives East; East x Down gives North in the horizontal plane.
        east = mag.cross(accel).normalized()
        north = accel.cross(east).normalized()

        value = math.degrees(math.atan2(east.dot(self.heading_axis),
                                        north.dot(self.heading_axis)))
        if value < 0:
            value += 360.0

        self._history[self._index] = value
        self._index = (self._index + 1) % HEADING_HISTORY_LENGTH

        # Readings on both sides of north are averaged around 0 rather than 180.
        wraps = (any(h < 90.0 for h in self._history)
                 and any(h > 270.0 for h in self._history))
        total = sum(h - 360.0 if wraps and h > 270.0 else h for h in self._history)
        return total / HEADING_HISTORY_LENGTH