"""Unit test fixtures with mocked dependencies."""

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.settings import (
    get_access_settings,
    get_address_validation_settings,
    get_auth_settings,
    get_database_settings,
    get_settings,
)


@pytest.fixture
def mock_session():
    """Mock AsyncSession whose begin() works as an async context manager."""
    session = Mock(spec=AsyncSession)

    ctx_manager = AsyncMock()
    ctx_manager.__aenter__ = AsyncMock(return_value=None)
    ctx_manager.__aexit__ = AsyncMock(return_value=None)

    session.begin = Mock(return_value=ctx_manager)
    return session


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings getters are lru_cached; reset them around every test."""
    getters = (
        get_settings,
        get_database_settings,
        get_auth_settings,
        get_address_validation_settings,
        get_access_settings,
    )
    for getter in getters:
        getter.cache_clear()
    yield
    for getter in getters:
        getter.cache_clear()
