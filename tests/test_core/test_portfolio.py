"""Tests for portfolio valuation and account management."""

import sys
import threading
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

sys.path.append("src")


class TestPortfolioValuator:
    """Cost-basis portfolio summaries."""

    def test_new_account_summary(self, trading_service, funded_account):
        summary = trading_service.get_portfolio_summary("alice")

        assert summary.cash_balance == Decimal("100000")
        assert summary.invested == Decimal("0")
        assert summary.current_value == Decimal("0")
        assert summary.total_value == Decimal("100000")
        assert summary.return_percent == Decimal("0.00")
        assert summary.starting_balance == Decimal("100000")
        assert summary.num_positions == 0

    def test_summary_values_holdings_at_cost(self, trading_service, funded_account):
        trading_service.execute_trade("alice", "AAPL", "buy", 10, Decimal("150"))
        trading_service.execute_trade("alice", "MSFT", "buy", 2, Decimal("400"))

        summary = trading_service.get_portfolio_summary("alice")

        assert summary.invested == Decimal("2300")
        assert summary.current_value == summary.invested
        assert summary.cash_balance == Decimal("100000") - Decimal("2300") - Decimal("9.90")
        assert summary.total_value == Decimal("99990.10")
        # Only commissions move the total at cost basis
        assert summary.return_percent == Decimal("-0.01")
        assert summary.num_positions == 2

    def test_total_value_is_cash_plus_invested(self, trading_service, funded_account):
        trading_service.execute_trade("alice", "AAPL", "buy", 10, Decimal("150"))
        trading_service.execute_trade("alice", "AAPL", "buy", 5, Decimal("160"))

        summary = trading_service.get_portfolio_summary("alice")

        assert summary.total_value == summary.cash_balance + summary.invested
        assert summary.invested == 15 * Decimal("153.333333")

    def test_holdings_sorted_by_symbol(self, trading_service, funded_account):
        for symbol in ("MSFT", "AAPL", "GOOG"):
            trading_service.execute_trade("alice", symbol, "buy", 1, Decimal("10"))

        holdings = trading_service.get_portfolio("alice")

        assert [h.symbol for h in holdings] == ["AAPL", "GOOG", "MSFT"]
        assert holdings[0].cost_basis == Decimal("10")

    def test_unknown_account(self, trading_service):
        from papertrade.services.trading import AccountNotFound

        with pytest.raises(AccountNotFound):
            trading_service.get_portfolio_summary("ghost")
        with pytest.raises(AccountNotFound):
            trading_service.get_portfolio("ghost")

    def test_return_percent_rounding(self):
        from papertrade.services.trading.models import return_percent

        assert return_percent(Decimal("110000"), Decimal("100000")) == Decimal("10.00")
        assert return_percent(Decimal("100239.15"), Decimal("100000")) == Decimal("0.24")
        assert return_percent(Decimal("5"), Decimal("0")) == Decimal("0.00")


class TestAccountManager:
    """Opening accounts and reading history."""

    def test_open_account_with_default_balance(self, trading_service):
        profile = trading_service.open_account("bob")

        assert profile.account_id == "bob"
        assert profile.cash_balance == Decimal("100000")
        assert profile.starting_balance == Decimal("100000")
        assert profile.created_at is not None

    def test_open_account_with_custom_balance(self, trading_service):
        profile = trading_service.open_account("carol", Decimal("2500.5"))

        assert profile.cash_balance == Decimal("2500.5")
        assert trading_service.get_account("carol").starting_balance == Decimal("2500.5")

    def test_duplicate_account(self, trading_service, funded_account):
        from papertrade.services.trading import AccountExists

        with pytest.raises(AccountExists, match="alice"):
            trading_service.open_account("alice")

    @pytest.mark.parametrize("balance", [Decimal("0"), Decimal("-5"), "lots"])
    def test_invalid_starting_balance(self, trading_service, balance):
        from papertrade.services.trading import InvalidOrder

        with pytest.raises(InvalidOrder):
            trading_service.open_account("dave", balance)

    def test_blank_account_id(self, trading_service):
        from papertrade.services.trading import InvalidOrder

        with pytest.raises(InvalidOrder):
            trading_service.open_account("   ")

    def test_get_unknown_account(self, trading_service):
        from papertrade.services.trading import AccountNotFound

        with pytest.raises(AccountNotFound, match="ghost"):
            trading_service.get_account("ghost")

    def test_transactions_newest_first(self, trading_service, funded_account):
        trading_service.execute_trade("alice", "AAPL", "buy", 1, Decimal("10"))
        trading_service.execute_trade("alice", "MSFT", "buy", 2, Decimal("20"))
        trading_service.execute_trade("alice", "AAPL", "sell", 1, Decimal("11"))

        records = trading_service.get_transactions("alice")

        assert [(r.symbol, r.side.value) for r in records] == [
            ("AAPL", "sell"),
            ("MSFT", "buy"),
            ("AAPL", "buy"),
        ]
        assert records[1].gross_amount == Decimal("40")
        assert records[1].commission == Decimal("4.95")

    def test_transactions_limit(self, trading_service, funded_account):
        for _ in range(4):
            trading_service.execute_trade("alice", "AAPL", "buy", 1, Decimal("10"))

        assert len(trading_service.get_transactions("alice", limit=2)) == 2
        assert trading_service.get_transactions("alice", limit=0) == []

    def test_transactions_for_unknown_account(self, trading_service):
        from papertrade.services.trading import AccountNotFound

        with pytest.raises(AccountNotFound):
            trading_service.get_transactions("ghost")

    def test_negative_limit(self, trading_service, funded_account):
        from papertrade.services.trading import InvalidOrder

        with pytest.raises(InvalidOrder):
            trading_service.get_transactions("alice", limit=-1)


class TestConsistentReads:
    """Summaries taken while trades run never mix before and after states."""

    def test_summary_during_parallel_buys(self, trading_service, funded_account):
        writers = 6
        summaries = []
        errors = []
        done = threading.Event()
        barrier = threading.Barrier(writers + 1)

        def buy():
            barrier.wait()
            try:
                trading_service.execute_trade("alice", "AAPL", "buy", 1, Decimal("100"))
            except Exception as e:
                errors.append(e)

        def read():
            barrier.wait()
            try:
                while not done.is_set():
                    summaries.append(trading_service.get_portfolio_summary("alice"))
            except Exception as e:
                errors.append(e)

        reader = threading.Thread(target=read)
        threads = [threading.Thread(target=buy) for _ in range(writers)]
        reader.start()
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        done.set()
        reader.join(timeout=60)

        assert errors == []
        summaries.append(trading_service.get_portfolio_summary("alice"))
        for summary in summaries:
            filled = summary.invested / Decimal("100")
            assert summary.total_value == Decimal("100000") - filled * Decimal("4.95")
            assert summary.total_value == summary.cash_balance + summary.invested
        assert summaries[-1].invested == Decimal("600")


class TestStorageFailures:
    """Read paths report an unreadable ledger as a storage failure."""

    @pytest.fixture
    def broken_store(self, isolated_store):
        error = OperationalError("SELECT", {}, Exception("unable to open database file"))
        with patch.object(isolated_store, "snapshot", side_effect=error):
            yield isolated_store

    @pytest.mark.parametrize(
        "read",
        [
            lambda service: service.get_account("alice"),
            lambda service: service.get_transactions("alice"),
            lambda service: service.get_portfolio("alice"),
            lambda service: service.get_portfolio_summary("alice"),
            lambda service: service.get_leaderboard(),
        ],
    )
    def test_reads_raise_storage_failure(self, trading_service, funded_account, broken_store, read):
        from papertrade.services.trading import StorageFailure

        with pytest.raises(StorageFailure, match="unable to open database file"):
            read(trading_service)

    def test_query_error_inside_snapshot(self, trading_service, funded_account):
        from papertrade.ormdb.repositories import HoldingRepository
        from papertrade.services.trading import StorageFailure

        error = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with patch.object(HoldingRepository, "list_for_account", side_effect=error):
            with pytest.raises(StorageFailure) as exc_info:
                trading_service.get_portfolio_summary("alice")

        assert exc_info.value.code == "storage_failure"
