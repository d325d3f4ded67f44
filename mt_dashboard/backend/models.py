"""
Data models for MetaTrader Account Dashboard
Provides object-oriented access to account, position and history data.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class NetType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class Session:
    token: str
    account_number: str
    server: str
    authenticated: bool = True


@dataclass(frozen=True)
class AccountSnapshot:
    balance: Decimal
    equity: Decimal
    margin: Decimal
    free_margin: Decimal
    margin_level: Decimal
    profit: Decimal
    currency: str
    name: Optional[str] = None
    leverage: Optional[int] = None
    company: Optional[str] = None


@dataclass(frozen=True)
class Position:
    ticket: int
    symbol: str
    side: Side
    volume: Decimal
    open_price: Decimal
    current_price: Decimal
    profit: Decimal
    swap: Decimal
    commission: Decimal
    open_time: Optional[datetime]
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    comment: Optional[str] = None

    @property
    def signed_volume(self) -> Decimal:
        return self.volume if self.side is Side.BUY else -self.volume


@dataclass(frozen=True)
class HistoryTrade:
    ticket: int
    symbol: str
    side: Side
    volume: Decimal
    open_price: Decimal
    close_price: Decimal
    profit: Decimal
    open_time: Optional[datetime]
    close_time: Optional[datetime]
    swap: Decimal = Decimal("0")
    commission: Decimal = Decimal("0")
    comment: Optional[str] = None


@dataclass(frozen=True)
class SymbolSummary:
    symbol: str
    net_volume: Decimal
    net_type: NetType
    total_profit: Decimal
    total_swap: Decimal = Decimal("0")
    total_commission: Decimal = Decimal("0")
    position_count: int = 0


@dataclass(frozen=True)
class DashboardData:
    """Everything one successful poll produced; replaced as a unit."""

    snapshot: AccountSnapshot
    positions: Tuple[Position, ...]
    history: Tuple[HistoryTrade, ...]
    updated_at: datetime
