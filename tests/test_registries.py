import pytest

from jobrelay.v1.core.registries import JobHandlerRegistry, Registry
from jobrelay.v1.domain.agents import StubAgentCollaboration
from jobrelay.v1.domain.onboarding import LoggingNotifier, StubOnboardingSteps
from jobrelay.v1.infra.jobs.handlers import AgentRequestHandler, OnboardingHandler
from jobrelay.v1.infra.jobs.registry_init import build_job_registry


def test_registry_basic_operations():
    """Test basic registry register, get, list operations."""
    registry = Registry[str]("Test")

    assert registry.list() == []

    registry.register("test_impl", "test_value")
    assert registry.get("test_impl") == "test_value"
    assert registry.list() == ["test_impl"]

    with pytest.raises(KeyError, match="No test implementation registered"):
        registry.get("nonexistent")


def test_registry_freeze_blocks_registration():
    registry = Registry[str]("Test")
    registry.register("a", "1")
    registry.freeze()

    assert registry.is_frozen()
    with pytest.raises(RuntimeError, match="frozen"):
        registry.register("b", "2")
    assert registry.get("a") == "1"


def test_job_registry_missing_kind_message():
    registry = JobHandlerRegistry()

    with pytest.raises(KeyError, match="No job implementation registered"):
        registry.get("onboarding")


def _build(settings):
    return build_job_registry(
        settings, StubAgentCollaboration(), StubOnboardingSteps(), LoggingNotifier()
    )


def test_build_job_registry_covers_every_kind(settings):
    registry = _build(settings)

    assert set(registry.list()) == {"onboarding", "agent-request"}
    assert isinstance(registry.get("onboarding"), OnboardingHandler)
    assert isinstance(registry.get("agent-request"), AgentRequestHandler)


def test_registry_open_in_development(settings):
    assert not _build(settings).is_frozen()


def test_registry_frozen_outside_development(settings):
    staging = settings.model_copy(update={"environment": "staging"})

    assert _build(staging).is_frozen()
