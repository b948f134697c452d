#!/usr/bin/env python3
"""
Tests for the registered command store, against a temporary SQLite file.
"""

import pytest
import pytest_asyncio

from storage.repository import Repository


@pytest_asyncio.fixture
async def repo(tmp_path):
    """Create a repository with initialized tables."""
    repository = Repository(str(tmp_path / "data" / "bot.db"))
    await repository.initialize_tables()
    return repository


@pytest.mark.asyncio
class TestRepository:
    """Test loading and saving registered command names."""

    async def test_first_run_is_empty(self, repo):
        assert await repo.load_registered() == set()

    async def test_save_replaces_previous_names(self, repo):
        await repo.save_registered({"ip", "help"})
        await repo.save_registered({"help", "rules"})

        assert await repo.load_registered() == {"help", "rules"}

    async def test_save_empty_clears_everything(self, repo):
        await repo.save_registered(["ip"])
        await repo.save_registered(set())

        assert await repo.load_registered() == set()

    async def test_state_survives_new_instance(self, repo):
        await repo.save_registered({"ip"})

        reopened = Repository(repo.db_path)

        assert await reopened.load_registered() == {"ip"}
