"""
Wallet, network and transaction helpers for talking to Soroban RPC.
"""

import asyncio
import dataclasses
import logging
from typing import List, Optional

from stellar_sdk import Keypair, Network, SorobanServerAsync, TransactionBuilder, xdr
from stellar_sdk.exceptions import (
    AccountNotFoundException,
    BaseRequestError,
    Ed25519SecretSeedInvalidError,
    PrepareTransactionException,
)
from stellar_sdk.soroban_rpc import GetTransactionResponse, GetTransactionStatus, SendTransactionStatus

from .errors import ConfigurationError, RemoteCallFailedError

logger = logging.getLogger(__name__)

BASE_FEE = 100
TX_TIMEOUT_SECONDS = 30
# getTransaction polling: 10 retries, 1 second apart
TX_POLL_RETRIES = 10
TX_POLL_INTERVAL = 1.0

NETWORK_PASSPHRASES = {
    "local": Network.STANDALONE_NETWORK_PASSPHRASE,
    "futurenet": Network.FUTURENET_NETWORK_PASSPHRASE,
    "testnet": Network.TESTNET_NETWORK_PASSPHRASE,
    "mainnet": Network.PUBLIC_NETWORK_PASSPHRASE,
}


def get_network_passphrase(network_type: str) -> str:
    if network_type not in NETWORK_PASSPHRASES:
        raise ConfigurationError(f"Unknown network type: {network_type}")
    return NETWORK_PASSPHRASES[network_type]


@dataclasses.dataclass
class ContractCall:
    """A single contract function invocation, ready to be put in a transaction."""

    contract_id: str
    function_name: str
    parameters: List[xdr.SCVal] = dataclasses.field(default_factory=list)

    @classmethod
    def call(cls, contract_id: str, function_name: str, *args: xdr.SCVal) -> "ContractCall":
        return cls(contract_id=contract_id, function_name=function_name, parameters=list(args))


async def get_wallet(chain: dict, options) -> Keypair:
    """Load the signing keypair and log the account it controls."""
    if not getattr(options, "private_key", None):
        raise ConfigurationError("Missing private key (use --privateKey or PRIVATE_KEY)")

    try:
        keypair = Keypair.from_secret(options.private_key)
    except Ed25519SecretSeedInvalidError as e:
        raise ConfigurationError(f"Invalid private key: {e}") from e

    address = keypair.public_key
    logger.info(f"Wallet address: {address}")

    async with SorobanServerAsync(chain["rpc"]) as server:
        try:
            account = await server.load_account(address)
        except (BaseRequestError, AccountNotFoundException) as e:
            raise RemoteCallFailedError(f"Could not load wallet account {address} from {chain['rpc']}: {e}") from e

    logger.info(f"Wallet sequence: {account.sequence}")
    return keypair


async def build_transaction(call: ContractCall, server: SorobanServerAsync, wallet: Keypair, network_type: str, options):
    account = await server.load_account(wallet.public_key)
    transaction = (
        TransactionBuilder(
            source_account=account,
            network_passphrase=get_network_passphrase(network_type),
            base_fee=BASE_FEE,
        )
        .append_invoke_contract_function_op(
            contract_id=call.contract_id,
            function_name=call.function_name,
            parameters=call.parameters,
        )
        .set_timeout(TX_TIMEOUT_SECONDS)
        .build()
    )

    if getattr(options, "verbose", False):
        logger.debug(f"Tx: {transaction.to_xdr()}")

    return transaction


async def prepare_transaction(call: ContractCall, server: SorobanServerAsync, wallet: Keypair, network_type: str, options):
    transaction = await build_transaction(call, server, wallet, network_type, options)

    try:
        prepared = await server.prepare_transaction(transaction)
    except PrepareTransactionException as e:
        raise RemoteCallFailedError(f"Simulation of {call.function_name} failed: {e}") from e

    prepared.sign(wallet)

    if getattr(options, "verbose", False):
        logger.debug(f"Signed tx: {prepared.to_xdr()}")

    return prepared


async def send_transaction(transaction, server: SorobanServerAsync, action: str, options):
    send_response = await server.send_transaction(transaction)
    logger.info(f"{action} Tx: {send_response.hash}")

    if send_response.status != SendTransactionStatus.PENDING:
        raise RemoteCallFailedError(
            f"{action} rejected with status {send_response.status}: {send_response.error_result_xdr}"
        )

    get_response = await server.get_transaction(send_response.hash)
    retries = TX_POLL_RETRIES

    while get_response.status == GetTransactionStatus.NOT_FOUND and retries > 0:
        await asyncio.sleep(TX_POLL_INTERVAL)
        get_response = await server.get_transaction(send_response.hash)
        retries -= 1

    if get_response.status != GetTransactionStatus.SUCCESS:
        raise RemoteCallFailedError(f"{action} failed ({get_response.status}): {get_response.result_xdr}")

    if not get_response.result_meta_xdr:
        raise RemoteCallFailedError("Empty resultMetaXdr in getTransaction response")

    logger.info(f"✅ {action}")
    return get_response


async def estimate_cost(transaction, server: SorobanServerAsync) -> dict:
    """Simulate a transaction and summarize the resources it would use."""
    simulation = await server.simulate_transaction(transaction)

    if simulation.error:
        raise RemoteCallFailedError(f"Simulation failed: {simulation.error}")

    return {
        "min_resource_fee": simulation.min_resource_fee,
        "events": len(simulation.events or []),
        "transaction_data": simulation.transaction_data,
    }


async def broadcast(call: ContractCall, wallet: Keypair, chain: dict, action: str, options) -> Optional[GetTransactionResponse]:
    """
    Submit a contract call signed by ``wallet`` and wait for it to land.

    With ``options.estimate_cost`` set the call is only simulated and the
    resource estimate is logged. Otherwise the getTransaction response is returned.
    """
    async with SorobanServerAsync(chain["rpc"]) as server:
        try:
            if getattr(options, "estimate_cost", False):
                transaction = await build_transaction(call, server, wallet, chain["networkType"], options)
                resource_cost = await estimate_cost(transaction, server)
                logger.info(f"Gas cost for {call.function_name}: {resource_cost}")
                return None

            transaction = await prepare_transaction(call, server, wallet, chain["networkType"], options)
            return await send_transaction(transaction, server, action, options)
        except (BaseRequestError, AccountNotFoundException) as e:
            raise RemoteCallFailedError(f"{action} failed: {e}") from e
