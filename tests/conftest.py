"""
Armature - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import pytest

from config import ContainerConfig
from core.context import ContainerContext
from di.factory import DefaultComponentFactory
from tests.support import Journal


@pytest.fixture
def journal() -> Journal:
    """Fresh invocation journal."""
    return Journal()


@pytest.fixture
def factory() -> DefaultComponentFactory:
    """Empty reference factory."""
    return DefaultComponentFactory()


@pytest.fixture
def container_config() -> ContainerConfig:
    """Container configuration independent of the environment."""
    return ContainerConfig(
        allow_descriptor_overriding=True,
        report_early_components=True,
        preinstantiate_singletons=True,
    )


@pytest.fixture
def context(factory, container_config) -> ContainerContext:
    """Unrefreshed context around the ``factory`` fixture."""
    ctx = ContainerContext(factory=factory, config=container_config, context_id="test")
    yield ctx
    ctx.close()

