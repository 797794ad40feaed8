"""
Deploy Axelar Soroban contracts on Stellar and optionally initialize them.

Usage:
    deploy-contract -e testnet --contractName axelar_auth_verifier \\
        --wasmPath target/wasm32-unknown-unknown/release/axelar_auth_verifier.wasm --initialize
    deploy-contract --contractName axelar_gateway --wasmPath <wasm> --address <existing> --initialize

The contract is deployed with the soroban CLI, recorded in the chains config
under stellar.contracts, and initialized through Soroban RPC.
"""

import argparse
import asyncio
import enum
import json
import logging
import os
import subprocess
import sys
from typing import Awaitable, Callable, Dict

from dotenv import load_dotenv
from eth_utils import keccak
from stellar_sdk import Keypair, StrKey, scval, xdr

from .common import OFFLINE, get_domain_separator
from .config import DEFAULT_ENV, ENVIRONMENTS, get_chain, load_config, save_config
from .errors import (
    ConfigurationError,
    DeploymentError,
    DeploymentFailedError,
    MissingDependencyError,
    UnknownContractError,
)
from .type_utils import sc_val_to_native, serialize_value, weighted_signers_to_sc_val
from .utils import ContractCall, broadcast, get_network_passphrase, get_wallet

logger = logging.getLogger(__name__)

DEFAULT_SOROBAN_CLI = "soroban"
PREVIOUS_SIGNERS_RETENTION = 15
MINIMUM_ROTATION_DELAY = 0
ZERO_NONCE = bytes(32)


class ContractName(str, enum.Enum):
    AXELAR_GATEWAY = "axelar_gateway"
    AXELAR_AUTH_VERIFIER = "axelar_auth_verifier"
    AXELAR_OPERATORS = "axelar_operators"
    AXELAR_GAS_SERVICE = "axelar_gas_service"


def resolve_contract_name(contract_name: str) -> ContractName:
    try:
        return ContractName(contract_name)
    except ValueError:
        raise UnknownContractError(f"Unknown contract: {contract_name}") from None


def get_contract_address(chain: dict, contract_name: ContractName):
    return chain.get("contracts", {}).get(contract_name.value, {}).get("address")


async def get_initialize_args(config: dict, chain: dict, contract_name: str, wallet: Keypair, options) -> Dict[str, xdr.SCVal]:
    """Build the ordered ``initialize`` arguments for a contract."""
    name = resolve_contract_name(contract_name)
    owner = scval.to_address(wallet.public_key)

    if name == ContractName.AXELAR_GATEWAY:
        auth_address = get_contract_address(chain, ContractName.AXELAR_AUTH_VERIFIER)

        if not auth_address:
            raise MissingDependencyError("Missing axelar_auth_verifier contract address")

        return {
            "authAddress": scval.to_address(auth_address),
            "owner": owner,
        }

    if name == ContractName.AXELAR_AUTH_VERIFIER:
        domain_separator = await get_domain_separator(config, chain, options)
        nonce = keccak(text=options.nonce) if getattr(options, "nonce", None) else ZERO_NONCE

        # The deployer is the sole initial signer until the first rotation
        initial_signers = scval.to_vec([
            weighted_signers_to_sc_val(
                nonce=nonce,
                signers=[{"signer": wallet.public_key, "weight": 1}],
                threshold=1,
            ),
        ])

        return {
            "owner": owner,
            "previousSignersRetention": scval.to_uint64(PREVIOUS_SIGNERS_RETENTION),
            "domainSeparator": scval.to_bytes(domain_separator),
            "minimumRotationDelay": scval.to_uint64(MINIMUM_ROTATION_DELAY),
            "initialSigners": initial_signers,
        }

    if name == ContractName.AXELAR_OPERATORS:
        return {"owner": owner}

    if name == ContractName.AXELAR_GAS_SERVICE:
        operators_address = get_contract_address(chain, ContractName.AXELAR_OPERATORS)
        gas_collector = scval.to_address(operators_address) if operators_address else owner

        return {
            "owner": owner,
            "gasCollector": gas_collector,
        }

    raise UnknownContractError(f"Unknown contract: {contract_name}")


async def post_deploy_gateway(chain: dict, wallet: Keypair, options) -> None:
    logger.info("Transferring ownership of auth contract to the gateway")
    auth_address = get_contract_address(chain, ContractName.AXELAR_AUTH_VERIFIER)
    gateway_address = get_contract_address(chain, ContractName.AXELAR_GATEWAY)

    if not auth_address:
        raise MissingDependencyError("Missing axelar_auth_verifier contract address")

    call = ContractCall.call(auth_address, "transfer_ownership", scval.to_address(gateway_address))
    await broadcast(call, wallet, chain, "Transferred ownership", options)


PostDeployFunction = Callable[[dict, Keypair, argparse.Namespace], Awaitable[None]]

POST_DEPLOY_FUNCTIONS: Dict[ContractName, PostDeployFunction] = {
    ContractName.AXELAR_GATEWAY: post_deploy_gateway,
}


def serialize_initialize_args(initialize_args: Dict[str, xdr.SCVal]) -> dict:
    return {key: serialize_value(sc_val_to_native(value)) for key, value in initialize_args.items()}


def deploy_wasm(wasm_path: str, private_key: str, rpc_url: str, network_passphrase: str) -> str:
    """Run ``soroban contract deploy`` and return the address it prints."""
    cmd = [
        os.getenv("SOROBAN_CLI", DEFAULT_SOROBAN_CLI),
        "contract", "deploy",
        "--wasm", str(wasm_path),
        "--source", private_key,
        "--rpc-url", rpc_url,
        "--network-passphrase", network_passphrase,
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        raise DeploymentFailedError(
            f"{cmd[0]} contract deploy exited with code {e.returncode}: {(e.stderr or '').strip()}"
        ) from e
    except OSError as e:
        raise DeploymentFailedError(f"Could not run {cmd[0]}: {e}") from e

    lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
    if not lines:
        raise DeploymentFailedError(f"{cmd[0]} contract deploy printed no contract address")

    return lines[-1]


async def process_command(options, config: dict, chain: dict) -> None:
    contract_name = options.contract_name
    network_passphrase = get_network_passphrase(chain["networkType"])
    wallet = await get_wallet(chain, options)

    if "contracts" not in chain:
        chain["contracts"] = {}

    previous = chain["contracts"].get(contract_name, {})
    contract_address = options.address

    logger.info(f"Deploying contract {contract_name}")

    if not contract_address:
        contract_address = deploy_wasm(options.wasm_path, options.private_key, chain["rpc"], network_passphrase)
        logger.info(f"✅ Deployed contract successfully! {contract_address}")
    else:
        logger.info(f"Using existing contract {contract_address}")

    chain["contracts"][contract_name] = {
        "address": contract_address,
        "deployer": wallet.public_key,
    }

    if not options.initialize:
        return

    if not StrKey.is_valid_contract(contract_address):
        raise ConfigurationError(f"Cannot initialize {contract_name}: {contract_address} is not a contract address")

    if previous.get("address") == contract_address and previous.get("initializeArgs"):
        logger.warning(f"⚠️  {contract_name} at {contract_address} was already initialized by a previous run")

    initialize_args = await get_initialize_args(config, chain, contract_name, wallet, options)
    serialized_args = serialize_initialize_args(initialize_args)
    # Recorded before the call so a failed initialize still leaves a trace in the config
    chain["contracts"][contract_name]["initializeArgs"] = serialized_args

    logger.info(f"Initializing contract with args {json.dumps(serialized_args, indent=2)}")

    call = ContractCall.call(contract_address, "initialize", *initialize_args.values())
    await broadcast(call, wallet, chain, "Initialized contract", options)

    post_deploy = POST_DEPLOY_FUNCTIONS.get(resolve_contract_name(contract_name))
    if post_deploy:
        await post_deploy(chain, wallet, options)
        logger.info("Post deployment setup executed")


async def main_processor(options, processor) -> None:
    """Load the config, run ``processor`` and write the config back exactly once."""
    config = load_config(options.env)
    chain = get_chain(config)

    try:
        await processor(options, config, chain)
    finally:
        save_config(config, options.env)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="deploy-contract", description="Deploy Axelar Soroban contracts on Stellar")
    parser.add_argument("-e", "--env", choices=ENVIRONMENTS, default=os.getenv("ENV", DEFAULT_ENV),
                        help="environment config to use (default: $ENV or testnet)")
    parser.add_argument("-p", "--privateKey", dest="private_key", default=os.getenv("PRIVATE_KEY"),
                        help="private key (default: $PRIVATE_KEY)")
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose output")
    parser.add_argument("--initialize", action="store_true", help="initialize the contract")
    parser.add_argument("--contractName", dest="contract_name", required=True, help="contract name to deploy")
    parser.add_argument("--wasmPath", dest="wasm_path", required=True, help="path to the WASM file")
    parser.add_argument("--address", help="existing instance to initialize")
    parser.add_argument("--estimateCost", dest="estimate_cost", action="store_true",
                        help="estimate on-chain resources")
    parser.add_argument("--nonce", help="optional nonce for the signer set")
    parser.add_argument("--domainSeparator", dest="domain_separator", default=OFFLINE,
                        help='domain separator (pass in the keccak256 hash value OR "offline" meaning that its computed locally)')
    return parser


def main(argv=None) -> int:
    load_dotenv()

    parser = build_parser()
    options = parser.parse_args(argv)

    if not options.private_key:
        parser.error("a private key is required (use --privateKey or set PRIVATE_KEY)")

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        asyncio.run(main_processor(options, process_command))
    except DeploymentError as e:
        logger.error(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
