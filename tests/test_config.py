import json

import pytest

from stellar_deploy.config import get_chain, get_config_path, load_config, save_config
from stellar_deploy.errors import ConfigurationError


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CHAINS_CONFIG_DIR", str(tmp_path))
    return tmp_path


def test_config_path_uses_env(config_dir):
    assert get_config_path("mainnet") == config_dir / "mainnet.json"


def test_save_then_load(config_dir, config):
    path = save_config(config, "testnet")

    assert path.read_text().endswith("}\n")
    assert load_config("testnet") == json.loads(json.dumps(config))


def test_load_missing_file(config_dir):
    with pytest.raises(ConfigurationError, match="not found"):
        load_config("local")


def test_get_chain(config, chain):
    assert get_chain(config) is chain

    with pytest.raises(ConfigurationError):
        get_chain({"axelar": {}})
