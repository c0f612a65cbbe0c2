import pytest

from micronet.navigation import (
    VALIDITY_TIME_FAST_MS,
    VALIDITY_TIME_SLOW_MS,
    WAYPOINT_NAME_LENGTH,
    NavigationData,
    WaypointName,
)


def test_fresh_data_is_invalid():
    nav = NavigationData()
    assert all(not item.valid for _, item in nav.values())
    assert nav.calibration_updated is False


def test_instances_do_not_share_values():
    a = NavigationData()
    b = NavigationData()
    a.spd_kt.valid = True
    assert b.spd_kt.valid is False


def test_values_lists_every_tracked_field():
    nav = NavigationData()
    names = {name for name, _ in nav.values()}
    assert names == set(NavigationData.FAST_FIELDS) | set(NavigationData.SLOW_FIELDS)


@pytest.mark.parametrize("name", NavigationData.FAST_FIELDS)
def test_fast_field_expires(name):
    nav = NavigationData()
    item = getattr(nav, name)
    item.valid = True
    item.timestamp = 1000
    nav.update_validity(1000 + VALIDITY_TIME_FAST_MS)
    assert item.valid is True
    nav.update_validity(1000 + VALIDITY_TIME_FAST_MS + 1)
    assert item.valid is False


@pytest.mark.parametrize("name", NavigationData.SLOW_FIELDS)
def test_slow_field_expires(name):
    nav = NavigationData()
    item = getattr(nav, name)
    item.valid = True
    item.timestamp = 1000
    nav.update_validity(1000 + VALIDITY_TIME_FAST_MS + 1)
    assert item.valid is True
    nav.update_validity(1000 + VALIDITY_TIME_SLOW_MS + 1)
    assert item.valid is False


def test_validity_window_wraps_around_32_bits():
    nav = NavigationData()
    nav.spd_kt.valid = True
    nav.spd_kt.timestamp = 0xFFFFFF00
    nav.update_validity(0x100)
    assert nav.spd_kt.valid is True


def test_waypoint_name_too_long():
    with pytest.raises(ValueError):
        WaypointName(name=b"X" * (WAYPOINT_NAME_LENGTH + 1))


def test_waypoint_name_kept_as_bytes():
    wp = WaypointName(valid=True, name=bytearray(b"HOME"))
    assert wp.name == b"HOME"