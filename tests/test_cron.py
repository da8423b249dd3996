import pytest

from roxy.cron import Cron, CronError, day_of_week, month, parse_cron, parse_field


def test_parse_linux_crontab():
    expected = Cron(
        seconds=Cron.IGNORE,
        minutes=frozenset(range(0, 60, 5)),
        hours=Cron.ALL,
        days_of_month=Cron.ALL,
        months=Cron.ALL,
        days_of_week=Cron.ALL,
        years=Cron.UNBOUND,
    )
    assert parse_cron("*/5 * * * *") == expected


@pytest.mark.parametrize(
    "value, expected",
    [("JAN", 1), ("jan", 1), ("Dec", 12), ("12", 12), ("7", 7)],
)
def test_month(value, expected):
    assert month(value) == expected


@pytest.mark.parametrize("value", ["13", "01", "JANUARY", ""])
def test_month_invalid(value):
    with pytest.raises(CronError):
        month(value)


@pytest.mark.parametrize(
    "value, is_vixie, expected",
    [
        ("SUN", True, 1),
        ("1", True, 1),
        ("7", True, 7),
        ("sat", True, 7),
        ("0", False, 1),
        ("7", False, 1),
        ("1", False, 2),
        ("6", False, 7),
    ],
)
def test_day_of_week(value, is_vixie, expected):
    assert day_of_week(value, is_vixie) == expected


def test_day_of_week_invalid():
    with pytest.raises(CronError):
        day_of_week("0", True)
    with pytest.raises(CronError):
        day_of_week("8", False)


def test_full_range_is_all():
    assert parse_field("0-59", 0, 59, False, False, False) is Cron.ALL
    assert parse_field("*", 0, 23, False, False, False) is Cron.ALL


def test_partial_range():
    assert parse_field("1-5", 0, 59, False, False, False) == frozenset(range(1, 6))
    assert parse_field("1-59", 0, 59, False, False, False) == frozenset(range(1, 60))


def test_range_with_step():
    assert parse_field("10-20/5", 0, 59, False, False, False) == frozenset({10, 15, 20})


def test_start_with_step():
    assert parse_field("50/5", 0, 59, False, False, False) == frozenset({50, 55})


def test_list_of_values():
    assert parse_field("1,3,5", 0, 59, False, False, False) == frozenset({1, 3, 5})


def test_month_names_in_field():
    assert parse_field("JAN,MAR", 1, 12, True, False, True) == frozenset({1, 3})


def test_day_names_in_field():
    assert parse_field("MON-FRI", 1, 7, True, True, False) == frozenset(range(2, 7))


@pytest.mark.parametrize("value", ["5-3", "0-60", "*/0", "abc", "-1", "1-2/x"])
def test_invalid_fields(value):
    with pytest.raises(CronError):
        parse_field(value, 0, 59, False, False, False)


def test_six_fields():
    cron = parse_cron("0 */10 * * * *")
    assert cron.seconds == frozenset({0})
    assert cron.minutes == frozenset(range(0, 60, 10))
    assert cron.years is Cron.ALL
    assert cron.days_of_week is Cron.ALL


def test_six_fields_all_seconds():
    assert parse_cron("* * * * * *").seconds is Cron.ALL


def test_seven_fields_years():
    cron = parse_cron("0 0 12 * * MON 2020-2022")
    assert cron.years == frozenset({2020, 2021, 2022})
    assert cron.hours == frozenset({12})
    assert cron.days_of_week == frozenset({2})


def test_seven_fields_year_out_of_range():
    with pytest.raises(CronError):
        parse_cron("0 0 0 * * * 1960-1970")


@pytest.mark.parametrize("text", ["", "* * * *", "* * * * * * * *"])
def test_wrong_field_count(text):
    with pytest.raises(CronError):
        parse_cron(text)