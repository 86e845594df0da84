"""Shared test configuration and fixtures."""

import os
import sys
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

sys.path.append("src")


@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated from the developer's environment and .env file."""
    from papertrade.config.settings import Settings

    return Settings(
        _env_file=None,
        environment="testing",
        endpoint_auth_token="test_endpoint_token",
        default_starting_balance=Decimal("100000.00"),
        commission_per_trade=Decimal("4.95"),
        trade_max_retries=5,
        trade_retry_backoff_ms=1,
        data_directory=str(tmp_path),
        database_url=f"sqlite:///{tmp_path / 'ledger.db'}",
        log_file_enabled=False,
    )


@pytest.fixture
def isolated_store(test_settings):
    """Create an isolated file-backed ledger store for testing."""
    from papertrade.ormdb.database import LedgerStore

    store = LedgerStore.from_settings(test_settings)
    store.create_tables()

    yield store

    store.dispose()


@pytest.fixture
def trading_service(isolated_store, test_settings):
    """Trading service over the isolated store."""
    from papertrade.services.trading import TradingService

    return TradingService(isolated_store, test_settings)


@pytest.fixture
def funded_account(trading_service):
    """An account opened with the default starting balance."""
    return trading_service.open_account("alice")


@pytest.fixture
def mock_price_oracle():
    """Price oracle that never reaches Yahoo Finance."""
    from papertrade.core.price_oracle import Quote

    oracle = Mock()
    oracle.get_quote.return_value = Quote(
        symbol="AAPL", price=Decimal("150.0000"), previous_close=Decimal("148.0000")
    )
    return oracle


@pytest.fixture(autouse=True)
def clean_env():
    """Keep real credentials out of the tests."""
    with patch.dict(os.environ, {}, clear=False):
        os.environ.pop("ENDPOINT_AUTH_TOKEN", None)
        os.environ.pop("DATABASE_URL", None)
        yield


@pytest.fixture(autouse=True)
def clean_lru_cache():
    """Clear LRU cache between tests to avoid state pollution."""
    from papertrade.config.settings import get_settings

    yield

    get_settings.cache_clear()
