"""
Chain Gateway Models - transfer and network dataclasses
"""
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class TransactionStatus(Enum):
    """Status of a pre-flight transaction record"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class NetworkStatus:
    """Live snapshot of a chain"""
    chain_id: int
    name: str
    latest_block: int
    gas_price: int  # wei
    symbol: str
    explorer_url: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TransferRequest:
    """Inbound transfer, amount in whole token units"""
    from_address: str
    token_address: str
    to_address: str
    amount: int
    chain_id: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferRequest":
        return cls(
            from_address=data["from_address"],
            token_address=data["token_address"],
            to_address=data["to_address"],
            amount=data["amount"],
            chain_id=data["chain_id"],
        )


@dataclass(frozen=True)
class TransferReceipt:
    """Confirmation of a settled token transfer"""
    transaction_hash: str
    block_number: int
    block_hash: str
    status: int
    gas_used: int
    chain_id: int
    from_address: str
    to_address: str
    token_address: str
    amount: int  # smallest unit
    explorer_url: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # uint256 amounts do not survive JSON number parsing
        data["amount"] = str(self.amount)
        return data


@dataclass
class Transaction:
    """Pre-flight transaction record, never broadcast"""
    from_address: str
    to_address: str
    amount: int  # smallest unit
    token_address: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: TransactionStatus = TransactionStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": str(self.amount),
            "token_address": self.token_address,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
        }
