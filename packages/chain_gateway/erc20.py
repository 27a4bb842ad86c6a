"""
ERC20 contract surface as typed method descriptors.

Calls are ABI-encoded with eth_abi from a fixed set of descriptors instead
of a parsed JSON ABI.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Any, Tuple

from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_utils import function_signature_to_4byte_selector


@dataclass(frozen=True)
class ContractMethod:
    """One contract function: name, argument types and return types."""
    name: str
    input_types: Tuple[str, ...]
    output_types: Tuple[str, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @cached_property
    def selector(self) -> bytes:
        """4-byte function selector."""
        return function_signature_to_4byte_selector(self.signature)

    def encode(self, *args: Any) -> bytes:
        """Build call data: selector followed by the encoded arguments."""
        if len(args) != len(self.input_types):
            raise TypeError(
                f"{self.signature} takes {len(self.input_types)} arguments, got {len(args)}"
            )
        return self.selector + abi_encode(list(self.input_types), list(args))

    def decode(self, data: bytes) -> Any:
        """Decode return data; single-value results are unwrapped."""
        values = abi_decode(list(self.output_types), bytes(data))
        if len(values) == 1:
            return values[0]
        return values


class ERC20:
    """Standard ERC20 methods used by the gateway."""

    BALANCE_OF = ContractMethod("balanceOf", ("address",), ("uint256",))
    DECIMALS = ContractMethod("decimals", (), ("uint8",))
    SYMBOL = ContractMethod("symbol", (), ("string",))
    TRANSFER = ContractMethod("transfer", ("address", "uint256"), ("bool",))
