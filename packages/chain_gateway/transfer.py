"""
Token transfers signed with the funding account.
"""
import logging
from typing import Optional

from web3 import Web3

from .balance import NATIVE_DECIMALS
from .client import Web3Factory
from .config import GatewayConfig
from .erc20 import ERC20
from .errors import InsufficientFundsError, InvalidAmountError, TransactionFailedError
from .models import Transaction, TransferReceipt, TransferRequest
from .pool import ClientPool, open_client
from .units import format_units, parse_units, validate_address

logger = logging.getLogger(__name__)


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"expected a whole number of tokens, got {amount!r}")
    if amount <= 0:
        raise InvalidAmountError(f"amount must be positive, got {amount}")


class TransferExecutor:
    """
    Executes ERC20 transfers on any registered chain.

    The funding credential comes from the GatewayConfig handed to the
    constructor; it is only loaded when a transfer runs.
    """

    def __init__(
        self,
        config: GatewayConfig,
        pool: Optional[ClientPool] = None,
        web3_factory: Optional[Web3Factory] = None,
    ):
        self.config = config
        self.pool = pool
        self.web3_factory = web3_factory

    def _client(self, chain_id: int):
        return open_client(
            chain_id,
            pool=self.pool,
            endpoint_url=self.config.rpc_url(chain_id),
            web3_factory=self.web3_factory,
        )

    async def transfer_token(
        self,
        from_address: Optional[str],
        token_address: str,
        to_address: str,
        amount: int,
        chain_id: int,
    ) -> TransferReceipt:
        """
        Transfer ``amount`` whole tokens to ``to_address`` and wait for it to be mined.

        ``from_address`` defaults to the funding account when None.

        Raises:
            NetworkError: Funding key missing or malformed, or connection failure
            InvalidAddressError: Malformed token, recipient or sender address
            InvalidAmountError: Amount not a positive integer
            ContractError: decimals() failed or the node rejected the transfer
            TransactionFailedError: Not mined, or reverted on-chain
        """
        account = self.config.funding_account()

        async with self._client(chain_id) as client:
            signer = client.signer(account)

            token = validate_address(token_address)
            recipient = validate_address(to_address)
            sender = signer.address if from_address is None else validate_address(from_address)
            _check_amount(amount)

            if sender != signer.address:
                logger.warning(
                    "Transfer requested from %s, signing with funding account %s",
                    sender, signer.address,
                )

            decimals = await client.call_method(token, ERC20.DECIMALS)
            value = parse_units(amount, decimals)

            logger.info(
                "Transferring %s (%s units) of %s to %s on chain %s",
                amount, value, token, recipient, chain_id,
            )
            tx_hash = await signer.send_call(token, ERC20.TRANSFER.encode(recipient, value))

            receipt = await client.wait_for_receipt(
                tx_hash,
                timeout=self.config.receipt_timeout,
                poll_latency=self.config.receipt_poll_interval,
            )
            if receipt.get("status") != 1:
                raise TransactionFailedError(f"transaction {tx_hash} reverted")

            block_hash = receipt.get("blockHash")
            result = TransferReceipt(
                transaction_hash=tx_hash,
                block_number=receipt["blockNumber"],
                block_hash=Web3.to_hex(block_hash) if isinstance(block_hash, bytes) else (block_hash or ""),
                status=receipt["status"],
                gas_used=receipt.get("gasUsed", 0),
                chain_id=chain_id,
                from_address=signer.address,
                to_address=recipient,
                token_address=token,
                amount=value,
                explorer_url=client.network.tx_url(tx_hash),
            )

        logger.info("Transfer %s confirmed in block %s", tx_hash, result.block_number)
        return result

    async def transfer(self, request: TransferRequest) -> TransferReceipt:
        return await self.transfer_token(
            request.from_address,
            request.token_address,
            request.to_address,
            request.amount,
            request.chain_id,
        )

    async def send_transaction(
        self,
        from_address: str,
        token_address: str,
        to_address: str,
        amount: int,
        chain_id: int,
    ) -> Transaction:
        """
        Pre-flight check: verify the sender's native balance covers ``amount``.

        Nothing is signed or broadcast. The returned record is always PENDING.

        Raises:
            InsufficientFundsError: Native balance below ``amount``
        """
        sender = validate_address(from_address)
        recipient = validate_address(to_address)
        token = validate_address(token_address)
        _check_amount(amount)
        value = parse_units(amount, NATIVE_DECIMALS)

        async with self._client(chain_id) as client:
            balance = await client.native_balance(sender)

        if balance < value:
            raise InsufficientFundsError(
                f"Insufficient funds: {sender} holds {format_units(balance, NATIVE_DECIMALS)}, "
                f"needs {amount}"
            )

        return Transaction(
            from_address=sender,
            to_address=recipient,
            amount=value,
            token_address=token,
        )
