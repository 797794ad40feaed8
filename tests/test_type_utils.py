"""Tests for SCVal conversion and JSON serialization helpers."""

import json

from stellar_sdk import Keypair, scval

from stellar_deploy.type_utils import (
    MAX_SAFE_INTEGER,
    sc_val_to_native,
    serialize_value,
    weighted_signers_to_sc_val,
)


class TestSerializeValue:

    def test_bytes_become_lowercase_hex(self):
        assert serialize_value(b"\xab\xcd\x00") == "abcd00"
        assert serialize_value(bytearray(b"\xff")) == "ff"

    def test_large_integers_become_decimal_strings(self):
        assert serialize_value(MAX_SAFE_INTEGER + 1) == str(MAX_SAFE_INTEGER + 1)
        assert serialize_value(-(2**100)) == str(-(2**100))
        assert serialize_value(2**128 - 1) == "340282366920938463463374607431768211455"

    def test_small_scalars_pass_through(self):
        assert serialize_value(15) == 15
        assert serialize_value(MAX_SAFE_INTEGER) == MAX_SAFE_INTEGER
        assert serialize_value(True) is True
        assert serialize_value("GABC") == "GABC"
        assert serialize_value(None) is None

    def test_nested_structure_is_isomorphic(self):
        value = {
            "owner": "GOWNER",
            "signers": [
                {"nonce": bytes(2), "weight": 2**64, "threshold": 1},
                (b"\x01", 3),
            ],
        }

        serialized = serialize_value(value)

        assert serialized == {
            "owner": "GOWNER",
            "signers": [
                {"nonce": "0000", "weight": "18446744073709551616", "threshold": 1},
                ["01", 3],
            ],
        }
        assert list(serialized["signers"][0]) == ["nonce", "weight", "threshold"]
        assert json.loads(json.dumps(serialized)) == serialized


class TestScValToNative:

    def test_scalars(self):
        keypair = Keypair.random()

        assert sc_val_to_native(scval.to_address(keypair.public_key)) == keypair.public_key
        assert sc_val_to_native(scval.to_bytes(b"\x01\x02")) == b"\x01\x02"
        assert sc_val_to_native(scval.to_uint64(15)) == 15
        assert sc_val_to_native(scval.to_uint128(2**100)) == 2**100
        assert sc_val_to_native(scval.to_symbol("owner")) == "owner"
        assert sc_val_to_native(scval.to_string("hello")) == "hello"
        assert sc_val_to_native(scval.to_bool(False)) is False
        assert sc_val_to_native(scval.to_void()) is None

    def test_vec_and_struct(self):
        value = scval.to_vec([
            scval.to_struct({"a": scval.to_uint32(1), "b": scval.to_bytes(b"\xff")}),
        ])

        assert sc_val_to_native(value) == [{"a": 1, "b": b"\xff"}]


class TestWeightedSigners:

    def test_signer_set_layout(self):
        keypair = Keypair.random()

        signer_set = weighted_signers_to_sc_val(
            nonce=bytes(32),
            signers=[{"signer": keypair.public_key, "weight": 1}],
            threshold=1,
        )

        assert sc_val_to_native(signer_set) == {
            "nonce": bytes(32),
            "signers": [{"signer": keypair.raw_public_key(), "weight": 1}],
            "threshold": 1,
        }
