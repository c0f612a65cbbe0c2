"""Navigation values shared between the Micronet decoder and encoder."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

VALIDITY_TIME_FAST_MS = 3000
VALIDITY_TIME_SLOW_MS = 10000
WAYPOINT_NAME_LENGTH = 16

_UINT32_MASK = 0xFFFFFFFF


@dataclass
class FloatValue:
    """A floating point measurement with validity and time of last update."""

    valid: bool = False
    value: float = 0.0
    timestamp: int = 0


@dataclass
class TimeValue:
    """Time of day (hours and minutes)."""

    valid: bool = False
    hour: int = 0
    minute: int = 0
    timestamp: int = 0


@dataclass
class DateValue:
    """Calendar date, year counted from 2000."""

    valid: bool = False
    day: int = 0
    month: int = 0
    year: int = 0
    timestamp: int = 0


@dataclass
class WaypointName:
    """Name of the active waypoint, at most WAYPOINT_NAME_LENGTH bytes."""

    valid: bool = False
    name: bytes = b""
    timestamp: int = 0

    def __post_init__(self) -> None:
        self.name = bytes(self.name)
        if len(self.name) > WAYPOINT_NAME_LENGTH:
            raise ValueError(f"waypoint name longer than {WAYPOINT_NAME_LENGTH} bytes")


def _float() -> FloatValue:
    return field(default_factory=FloatValue)


@dataclass
class NavigationData:
    """All navigation values and calibration parameters of the boat."""

    spd_kt: FloatValue = _float()
    awa_deg: FloatValue = _float()
    aws_kt: FloatValue = _float()
    twa_deg: FloatValue = _float()
    tws_kt: FloatValue = _float()
    dpt_m: FloatValue = _float()
    vcc_v: FloatValue = _float()
    log_nm: FloatValue = _float()
    trip_nm: FloatValue = _float()
    stp_degc: FloatValue = _float()

    time: TimeValue = field(default_factory=TimeValue)
    date: DateValue = field(default_factory=DateValue)
    latitude_deg: FloatValue = _float()
    longitude_deg: FloatValue = _float()
    cog_deg: FloatValue = _float()
    sog_kt: FloatValue = _float()
    xte_nm: FloatValue = _float()
    dtw_nm: FloatValue = _float()
    btw_deg: FloatValue = _float()
    waypoint: WaypointName = field(default_factory=WaypointName)
    vmgwp_kt: FloatValue = _float()

    # Magnetic heading, including heading offset but not variation or deviation.
    mag_hdg_deg: FloatValue = _float()

    calibration_updated: bool = False
    water_speed_factor_per: float = 0.0
    water_temperature_offset_degc: float = 0.0
    depth_offset_m: float = 0.0
    wind_speed_factor_per: float = 0.0
    wind_direction_offset_deg: float = 0.0
    heading_offset_deg: float = 0.0
    magnetic_variation_deg: float = 0.0
    wind_shift_min: float = 0.0

    FAST_FIELDS = (
        "awa_deg", "aws_kt", "dpt_m", "log_nm", "stp_degc", "spd_kt",
        "trip_nm", "twa_deg", "tws_kt", "vcc_v", "mag_hdg_deg",
    )
    SLOW_FIELDS = (
        "time", "date", "latitude_deg", "longitude_deg", "cog_deg", "sog_kt",
        "xte_nm", "dtw_nm", "btw_deg", "waypoint", "vmgwp_kt",
    )

    def update_validity(self, now_ms: int) -> None:
        """Invalidate every value not refreshed within its validity window.

        Time arithmetic wraps at 32 bits like a millisecond tick counter.
        """
        for names, limit in ((self.FAST_FIELDS, VALIDITY_TIME_FAST_MS),
                             (self.SLOW_FIELDS, VALIDITY_TIME_SLOW_MS)):
            for name in names:
                item = getattr(self, name)
                if ((now_ms - item.timestamp) & _UINT32_MASK) > limit:
                    item.valid = False

    def values(self):
        """Yield (name, value) for every timestamped value."""
        for f in fields(self):
            item = getattr(self, f.name)
            if hasattr(item, "timestamp"):
                yield f.name, item