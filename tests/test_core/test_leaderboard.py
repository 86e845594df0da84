"""Tests for leaderboard ranking."""

import sys
from decimal import Decimal

import pytest

sys.path.append("src")


class TestLeaderboard:
    """Accounts ranked by total value at cost basis."""

    def test_empty_leaderboard(self, trading_service):
        assert trading_service.get_leaderboard() == []

    def test_ranked_by_total_value(self, trading_service):
        trading_service.open_account("small", Decimal("500"))
        trading_service.open_account("large", Decimal("5000"))
        trading_service.open_account("middle", Decimal("1000"))

        entries = trading_service.get_leaderboard()

        assert [(e.rank, e.account_id) for e in entries] == [
            (1, "large"),
            (2, "middle"),
            (3, "small"),
        ]
        assert entries[0].total_value == Decimal("5000")

    def test_holdings_count_at_cost(self, trading_service):
        trading_service.open_account("cash_only", Decimal("1000"))
        trading_service.open_account("investor", Decimal("1010"))
        # 1010 - 4.95 commission leaves the investor ahead at 1005.05
        trading_service.execute_trade("investor", "AAPL", "buy", 5, Decimal("100"))

        entries = trading_service.get_leaderboard()

        assert entries[0].account_id == "investor"
        assert entries[0].total_value == Decimal("1005.05")
        assert entries[0].invested_value == Decimal("500")
        assert entries[0].cash_balance == Decimal("505.05")
        assert entries[0].trade_count == 1
        assert entries[1].trade_count == 0

    def test_ties_ordered_by_account_id(self, trading_service):
        for account_id in ("zed", "amy", "kim"):
            trading_service.open_account(account_id, Decimal("1000"))

        entries = trading_service.get_leaderboard()

        assert [e.account_id for e in entries] == ["amy", "kim", "zed"]
        assert [e.rank for e in entries] == [1, 2, 3]

    def test_limit(self, trading_service):
        for i in range(5):
            trading_service.open_account(f"user{i}", Decimal(1000 + i))

        entries = trading_service.get_leaderboard(limit=2)

        assert [e.account_id for e in entries] == ["user4", "user3"]
        assert trading_service.get_leaderboard(limit=0) == []

    def test_default_limit_from_settings(self, trading_service):
        trading_service.settings.leaderboard_default_limit = 3
        for i in range(5):
            trading_service.open_account(f"user{i}")

        assert len(trading_service.get_leaderboard()) == 3

    def test_negative_limit(self, trading_service):
        from papertrade.services.trading import InvalidOrder

        with pytest.raises(InvalidOrder):
            trading_service.get_leaderboard(limit=-1)

    def test_return_percent_and_member_since(self, trading_service):
        profile = trading_service.open_account("alice", Decimal("1000"))
        trading_service.execute_trade("alice", "AAPL", "buy", 1, Decimal("10"))

        entry = trading_service.get_leaderboard()[0]

        assert entry.return_percent == Decimal("-0.50")
        assert entry.member_since.replace(tzinfo=None) == profile.created_at.replace(
            tzinfo=None
        )
