import argparse

import pytest
from stellar_sdk import Keypair


@pytest.fixture
def wallet():
    return Keypair.random()


@pytest.fixture
def chain():
    return {
        "name": "Stellar",
        "axelarId": "stellar",
        "rpc": "https://soroban-testnet.stellar.org",
        "networkType": "testnet",
        "contracts": {},
    }


@pytest.fixture
def config(chain):
    return {
        "axelar": {
            "chainId": "axelar-testnet-lisbon-3",
            "lcd": "https://lcd-axelar-testnet.example.org",
            "contracts": {
                "Router": {"address": "axelar1routeraddress"},
                "MultisigProver": {"stellar": {"address": "axelar1proveraddress"}},
            },
        },
        "stellar": chain,
    }


@pytest.fixture
def make_options(wallet):
    def _make_options(**overrides):
        values = {
            "env": "testnet",
            "private_key": wallet.secret,
            "verbose": False,
            "initialize": False,
            "contract_name": "axelar_operators",
            "wasm_path": "target/axelar_operators.wasm",
            "address": None,
            "estimate_cost": False,
            "nonce": None,
            "domain_separator": "offline",
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    return _make_options
