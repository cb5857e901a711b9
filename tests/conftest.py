from __future__ import annotations

from datetime import date, datetime

import pytest

from tests.fakes import build_test_container


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 14, 17, 30, 0)


@pytest.fixture
def fixed_today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def container(tmp_path):
    return build_test_container(tmp_path)
