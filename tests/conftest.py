"""Fixtures partagées par les tests execr."""

from unittest.mock import MagicMock

import pytest

import execr
from execr.commands.runner import clear_memoize_cache
from execr.logging.base import Logger


@pytest.fixture(autouse=True)
def reset_execr_state():
    """Réinitialise le cache et la configuration globale."""
    clear_memoize_cache()
    execr.configure()
    yield
    clear_memoize_cache()
    execr.configure()


@pytest.fixture
def mock_logger():
    """Fixture fournissant un logger mock."""
    return MagicMock(spec=Logger)
