import pytest

from linkmanager.managers.config_manager import config_manager


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the packaged settings.json."""
    config_manager.reset()
    yield
