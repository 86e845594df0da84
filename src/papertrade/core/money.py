"""Decimal precision and bounds shared by the ledger, the engine and quotes."""

from decimal import Decimal

# Prices and cash carry at most 4 decimal places; cost basis keeps 6
PRICE_QUANTUM = Decimal("0.0001")
COST_BASIS_QUANTUM = Decimal("0.000001")
PERCENT_QUANTUM = Decimal("0.01")

# Column precision: 18 digits for money, 20 for cost basis, both with 14 whole digits
MONEY_PRECISION = 18
MONEY_SCALE = 4
COST_BASIS_PRECISION = 20
COST_BASIS_SCALE = 6

# Largest cash balance, price or trade amount the ledger can hold
MAX_AMOUNT = Decimal("99999999999999.9999")
