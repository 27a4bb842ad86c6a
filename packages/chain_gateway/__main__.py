"""
Command-line access to balances, network status and transfers.

    python -m chain_gateway networks
    python -m chain_gateway status 137
    python -m chain_gateway balance 1 0xWallet --token 0xToken
    python -m chain_gateway transfer 56 0xToken 0xRecipient 10
    python -m chain_gateway encrypt-key
"""
import argparse
import asyncio
import getpass
import json
import sys
from typing import List, Optional

from .balance import BalanceResolver
from .config import GatewayConfig, setup_logging
from .credentials import encrypt_funding_key
from .errors import GatewayError, ValidationError
from .networks import NETWORKS
from .pool import open_client
from .transfer import TransferExecutor


def _print(data) -> None:
    print(json.dumps(data, indent=2, default=str))


async def _status(config: GatewayConfig, args) -> dict:
    async with open_client(args.chain_id, endpoint_url=config.rpc_url(args.chain_id)) as client:
        status = await client.network_status()
    return status.to_dict()


async def _balance(config: GatewayConfig, args) -> list:
    resolver = BalanceResolver()
    async with open_client(args.chain_id, endpoint_url=config.rpc_url(args.chain_id)) as client:
        balances = await resolver.multiple_balances(client, args.token or [], args.address)
    return [b.to_dict() for b in balances]


async def _transfer(config: GatewayConfig, args) -> dict:
    executor = TransferExecutor(config)
    receipt = await executor.transfer_token(
        args.sender,
        args.token,
        args.to,
        args.amount,
        args.chain_id,
    )
    return receipt.to_dict()


def _encrypt_key() -> dict:
    private_key = getpass.getpass("Funding private key: ")
    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        raise ValidationError("passwords do not match")
    return {"FUNDING_KEY_ENCRYPTED": encrypt_funding_key(private_key, password)}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chain_gateway", description="EVM balance and transfer gateway")
    parser.add_argument("--env-file", type=str, help="Path to a .env file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("networks", help="List supported chains")

    status = sub.add_parser("status", help="Latest block and gas price")
    status.add_argument("chain_id", type=int)

    balance = sub.add_parser("balance", help="Native and token balances")
    balance.add_argument("chain_id", type=int)
    balance.add_argument("address")
    balance.add_argument("--token", action="append", help="ERC20 address, repeatable")

    transfer = sub.add_parser("transfer", help="Send ERC20 tokens from the funding account")
    transfer.add_argument("chain_id", type=int)
    transfer.add_argument("token")
    transfer.add_argument("to")
    transfer.add_argument("amount", type=int, help="Whole token units")
    transfer.add_argument("--from", dest="sender", help="Expected sender address")

    sub.add_parser("encrypt-key", help="Encrypt a funding key for FUNDING_KEY_ENCRYPTED")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = GatewayConfig.from_env(dotenv_path=args.env_file)
        setup_logging(config.log_level)

        if args.command == "networks":
            _print([
                {"chain_id": cid, "name": cfg.name, "symbol": cfg.native_symbol, "testnet": cfg.is_testnet}
                for cid, cfg in NETWORKS.items()
            ])
        elif args.command == "status":
            _print(asyncio.run(_status(config, args)))
        elif args.command == "balance":
            _print(asyncio.run(_balance(config, args)))
        elif args.command == "transfer":
            _print(asyncio.run(_transfer(config, args)))
        elif args.command == "encrypt-key":
            _print(_encrypt_key())
    except GatewayError as e:
        _print(e.to_dict())
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
