"""Shared pytest setup for the fe-analysis tests."""
import pytest

import fe_analysis.settings as settings


@pytest.fixture(autouse=True)
def reset_fe_config():
    """Every test starts from a freshly created analysis config."""
    # pylint: disable=protected-access
    old_config = settings._CFG
    settings._CFG = None
    yield
    settings._CFG = old_config
