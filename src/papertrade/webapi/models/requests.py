"""Request models for the Papertrade API."""

from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class AccountCreateRequest(BaseModel):
    """Request model for opening a trading account."""

    account_id: str = Field(
        ...,
        description="Authenticated user identifier",
        min_length=1,
        max_length=64,
        validation_alias=AliasChoices("account_id", "accountId"),
    )
    starting_balance: Optional[Decimal] = Field(
        None,
        description="Initial cash; defaults to the configured starting balance",
        validation_alias=AliasChoices("starting_balance", "startingBalance"),
    )

    @field_validator("account_id")
    @classmethod
    def validate_account_id(cls, v):
        """Strip surrounding whitespace from the account id."""
        v = v.strip()
        if not v:
            raise ValueError("Account id must not be blank")
        return v


class TradeOrderRequest(BaseModel):
    """
    Request model for a market order.

    Only types are checked here; quantity, price and side rules are enforced
    by the trade executor so every caller gets the same errors.
    """

    symbol: str = Field(..., description="Stock symbol (e.g., AAPL, MSFT)", max_length=12)
    shares: int = Field(..., description="Whole number of shares", strict=True)
    side: str = Field(
        ...,
        description="Order side: buy or sell",
        validation_alias=AliasChoices("side", "action"),
    )
    price_per_share: Decimal = Field(
        ...,
        description="Execution price per share",
        validation_alias=AliasChoices("price_per_share", "pricePerShare", "price"),
    )
