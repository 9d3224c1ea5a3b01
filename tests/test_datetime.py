import datetime
import time

import pytest

from bsonkit.datetime import DateTime

UTC = datetime.timezone.utc


def test_from_timestamp_millis():
    dt = DateTime.from_timestamp(1.234)
    assert dt.millis == 1234
    assert dt.to_timestamp() == 1.234


def test_from_timestamp_epoch():
    assert DateTime.from_timestamp(0).millis == 0


def test_from_timestamp_before_epoch_truncates_toward_zero():
    assert DateTime.from_timestamp(-1.5).millis == -1500
    assert DateTime.from_timestamp(-0.0019).millis == -1


def test_from_timestamp_clamps():
    assert DateTime.from_timestamp(float("inf")) == DateTime.MAX
    assert DateTime.from_timestamp(float("-inf")) == DateTime.MIN
    assert DateTime.from_timestamp(1e300) == DateTime.MAX
    assert DateTime.from_timestamp(-(10**30)) == DateTime.MIN


def test_from_timestamp_nan():
    with pytest.raises(ValueError):
        DateTime.from_timestamp(float("nan"))


def test_now_is_current():
    before = time.time_ns() // 1_000_000
    now = DateTime.now()
    after = time.time_ns() // 1_000_000
    assert before <= now.millis <= after


def test_from_datetime_truncates_to_millis():
    for micros in (123000, 123456, 123999):
        src = datetime.datetime(2014, 11, 28, 12, 0, 9, micros, tzinfo=UTC)
        converted = DateTime.from_datetime(src).to_datetime()
        assert converted.microsecond == 123000
        assert converted.microsecond % 1000 == 0


def test_from_datetime_without_subsecond():
    src = datetime.datetime(2014, 11, 28, 12, 0, 9, tzinfo=UTC)
    dt = DateTime.from_datetime(src)
    assert dt.to_datetime() == src
    assert dt.millis % 1000 == 0


def test_naive_datetime_is_utc():
    naive = datetime.datetime(2020, 6, 9, 10, 58, 7, 95000)
    assert DateTime.from_datetime(naive).millis == 1591700287095


def test_other_timezone():
    tz = datetime.timezone(datetime.timedelta(hours=2))
    src = datetime.datetime(2020, 6, 9, 12, 58, 7, 95000, tzinfo=tz)
    assert DateTime.from_datetime(src).millis == 1591700287095


def test_extremes_clamp_to_datetime_range():
    assert DateTime.MAX.to_datetime() == datetime.datetime.max.replace(tzinfo=UTC)
    assert DateTime.MIN.to_datetime() == datetime.datetime.min.replace(tzinfo=UTC)


def test_extremes_timestamp():
    assert DateTime.from_millis(2**63 - 1) == DateTime.MAX
    assert DateTime.from_millis(-(2**63)) == DateTime.MIN
    assert DateTime.from_millis(2**63 - 1).millis == 2**63 - 1
    assert DateTime.from_millis(-(2**63)).millis == -(2**63)


def test_out_of_range_millis():
    with pytest.raises(OverflowError):
        DateTime.from_millis(2**63)
    with pytest.raises(OverflowError):
        DateTime.from_millis(-(2**63) - 1)


def test_rfc3339():
    src = datetime.datetime(1996, 12, 20, 0, 39, 57, tzinfo=UTC)
    assert DateTime.from_datetime(src).to_rfc3339() == "1996-12-20T00:39:57Z"
    assert DateTime.from_millis(1591700287095).to_rfc3339() == "2020-06-09T10:58:07.095Z"
    assert DateTime.from_millis(-1).to_rfc3339() == "1969-12-31T23:59:59.999Z"


def test_display():
    assert str(DateTime.from_millis(1591700287095)) == "2020-06-09 10:58:07.095 UTC"
    assert str(DateTime.from_millis(0)) == "1970-01-01 00:00:00 UTC"
    assert str(DateTime.MAX) == str(2**63 - 1)


def test_ordering():
    assert DateTime.from_millis(1) < DateTime.from_millis(2)
    assert DateTime.MIN < DateTime.from_millis(0) < DateTime.MAX