from datetime import datetime, timedelta, timezone

import pytest

from trackwork.config import Config

CET = timezone(timedelta(hours=1))


def at(year, month, day, hour=0, minute=0, second=0, tz=CET):
    return datetime(year, month, day, hour, minute, second, tzinfo=tz)


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "work.csv"


@pytest.fixture
def config(data_file):
    return Config(file=data_file)
