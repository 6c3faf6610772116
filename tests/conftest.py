"""
Shared pytest fixtures for the gitloupe test suite.

Repositories are built from real loose objects in tmp_path, so nothing
here needs the git executable. Tests that do need it use the
requires_git marker from factories.py with temp_git_repo.

Usage in tests:
    def test_something(loose_factory):
        blob = loose_factory.add_blob("hi\\n")
        snapshot = loose_factory.build_snapshot()

    def test_with_data(sample_repo):
        factory, hashes = sample_repo
        snapshot = factory.build_snapshot()
"""

import pytest

from gitloupe.orchestrator import TaskOrchestrator, OrchestratorConfig, reset_orchestrator
from gitloupe.presentation.codec import HashCodec
from gitloupe.presentation.symbols import ASCII
from tests.factories import LooseObjectFactory, FakeGitCapability, create_git_repo


@pytest.fixture
def loose_factory(tmp_path):
    """Empty repository with objects/, objects/info and objects/pack."""
    return LooseObjectFactory(tmp_path)


@pytest.fixture
def sample_repo(loose_factory):
    """
    (factory, hashes) for the sample history:

        tag v1.0 -> second -> first
        second: README.md (v2), logo.png (binary), src/main.py
    """
    hashes = loose_factory.create_sample_repo()
    return loose_factory, hashes


@pytest.fixture
def sample_snapshot(sample_repo):
    factory, _ = sample_repo
    return factory.build_snapshot()


@pytest.fixture
def temp_git_repo(tmp_path):
    """Repository made by the git CLI (tests using it need requires_git)."""
    return create_git_repo(tmp_path / "gitrepo")


@pytest.fixture
def fake_git():
    return FakeGitCapability()


@pytest.fixture
def codec():
    return HashCodec()


@pytest.fixture
def ascii_symbols():
    return ASCII


@pytest.fixture
def sequential_orchestrator():
    orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=False))
    yield orchestrator
    orchestrator.shutdown()


@pytest.fixture
def parallel_orchestrator():
    orchestrator = TaskOrchestrator(OrchestratorConfig(enabled=True, io_workers=4, task_timeout=10.0))
    yield orchestrator
    orchestrator.shutdown()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep user config and GITLOUPE_* settings from leaking into tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for var in ("GITLOUPE_AUGMENT", "GITLOUPE_GIT_TIMEOUT", "GITLOUPE_SYMBOLS",
                "GITLOUPE_FORMAT", "GITLOUPE_REPO", "GITLOUPE_LOG_LEVEL",
                "GITLOUPE_PARALLEL_ENABLED", "GITLOUPE_IO_WORKERS"):
        monkeypatch.delenv(var, raising=False)
    yield
    reset_orchestrator()
