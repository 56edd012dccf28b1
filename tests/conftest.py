import pytest

from xrun.core import command_registry


@pytest.fixture
def clean_registry():
    """Empties the module-level registries before and after a test."""
    command_registry.clear_registry()
    yield command_registry
    command_registry.clear_registry()
