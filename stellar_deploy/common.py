"""
Domain separator lookup shared by contracts that verify Axelar signer sets.

The domain separator scopes signatures to one Axelar deployment. It is
keccak256(axelarId + routerAddress + axelarChainId), and the multisig prover
on the Axelar network holds the value that is actually in use.
"""

import base64
import json
import logging
import re

import aiohttp
from eth_utils import decode_hex, keccak

from .errors import ConfigurationError, DomainSeparatorError

logger = logging.getLogger(__name__)

OFFLINE = "offline"
KECCAK256_HASH_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_keccak256_hash(value) -> bool:
    return isinstance(value, str) and bool(KECCAK256_HASH_PATTERN.match(value))


def calculate_domain_separator(axelar_id: str, router_address: str, axelar_chain_id: str) -> bytes:
    return keccak(text=f"{axelar_id}{router_address}{axelar_chain_id}")


async def fetch_prover_domain_separator(lcd_url: str, prover_address: str) -> bytes:
    """Query the multisig prover contract config through the Axelar LCD."""
    query = base64.b64encode(json.dumps({"config": {}}).encode()).decode()
    url = f"{lcd_url.rstrip('/')}/cosmwasm/wasm/v1/contract/{prover_address}/smart/{query}"

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url) as resp:
                resp.raise_for_status()
                result = await resp.json()
    except aiohttp.ClientError as e:
        raise DomainSeparatorError(f"Could not query prover {prover_address} at {lcd_url}: {e}") from e

    domain_separator = result.get("data", {}).get("domain_separator")
    if not domain_separator:
        raise DomainSeparatorError(f"Prover {prover_address} returned no domain separator")

    try:
        return decode_hex(domain_separator)
    except ValueError as e:
        raise DomainSeparatorError(f"Prover {prover_address} returned a malformed domain separator: {e}") from e


async def get_domain_separator(config: dict, chain: dict, options) -> bytes:
    domain_separator = getattr(options, "domain_separator", OFFLINE) or OFFLINE

    if is_keccak256_hash(domain_separator):
        return decode_hex(domain_separator)

    axelar = config.get("axelar", {})
    axelar_id = chain.get("axelarId")
    router_address = axelar.get("contracts", {}).get("Router", {}).get("address")
    axelar_chain_id = axelar.get("chainId")

    for name, value in (("axelarId", axelar_id), ("Router address", router_address), ("axelar chainId", axelar_chain_id)):
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"Missing or invalid {name} in chains config")

    expected = calculate_domain_separator(axelar_id, router_address, axelar_chain_id)

    if domain_separator == OFFLINE:
        logger.info("Computed domain separator offline")
        return expected

    logger.info(f"Retrieving domain separator for {axelar_id} from Axelar network")
    prover_address = axelar.get("contracts", {}).get("MultisigProver", {}).get(axelar_id, {}).get("address")
    lcd_url = axelar.get("lcd")

    if not prover_address or not lcd_url:
        raise ConfigurationError(f"Missing MultisigProver address or LCD url for {axelar_id}")

    actual = await fetch_prover_domain_separator(lcd_url, prover_address)

    if actual != expected:
        raise DomainSeparatorError(
            f"Domain separator mismatch: expected 0x{expected.hex()}, prover has 0x{actual.hex()}"
        )

    return expected
