"""
Helpers for converting between Soroban SCVal values and plain Python values.
"""

from typing import Any, Dict, List

from stellar_sdk import Address, scval, xdr

# Integers past this bound lose precision as JSON numbers in most readers
MAX_SAFE_INTEGER = 2**53 - 1

_INTEGER_TYPES = {
    xdr.SCValType.SCV_U32: scval.from_uint32,
    xdr.SCValType.SCV_I32: scval.from_int32,
    xdr.SCValType.SCV_U64: scval.from_uint64,
    xdr.SCValType.SCV_I64: scval.from_int64,
    xdr.SCValType.SCV_U128: scval.from_uint128,
    xdr.SCValType.SCV_I128: scval.from_int128,
    xdr.SCValType.SCV_U256: scval.from_uint256,
    xdr.SCValType.SCV_I256: scval.from_int256,
}


def weighted_signers_to_sc_val(nonce: bytes, signers: List[Dict[str, Any]], threshold: int) -> xdr.SCVal:
    """
    Encode a weighted signer set as the struct expected by the auth verifier.

    Each signer is a dict with a ``signer`` public key (G... strkey) and a ``weight``.
    Struct keys are already in the sorted order Soroban requires for maps.
    """
    return scval.to_struct({
        "nonce": scval.to_bytes(bytes(nonce)),
        "signers": scval.to_vec([
            scval.to_struct({
                "signer": scval.to_bytes(Address(entry["signer"]).key),
                "weight": scval.to_uint128(entry["weight"]),
            })
            for entry in signers
        ]),
        "threshold": scval.to_uint128(threshold),
    })


def sc_val_to_native(sc_val: xdr.SCVal) -> Any:
    """Convert an SCVal into the closest plain Python value."""
    sc_type = sc_val.type

    if sc_type == xdr.SCValType.SCV_VOID:
        return None
    if sc_type == xdr.SCValType.SCV_BOOL:
        return scval.from_bool(sc_val)
    if sc_type == xdr.SCValType.SCV_ADDRESS:
        return scval.from_address(sc_val).address
    if sc_type == xdr.SCValType.SCV_BYTES:
        return scval.from_bytes(sc_val)
    if sc_type == xdr.SCValType.SCV_SYMBOL:
        return scval.from_symbol(sc_val)
    if sc_type == xdr.SCValType.SCV_STRING:
        return scval.from_string(sc_val).decode("utf-8")
    if sc_type in _INTEGER_TYPES:
        return _INTEGER_TYPES[sc_type](sc_val)
    if sc_type == xdr.SCValType.SCV_VEC:
        return [sc_val_to_native(item) for item in sc_val.vec.sc_vec]
    if sc_type == xdr.SCValType.SCV_MAP:
        return {
            sc_val_to_native(entry.key): sc_val_to_native(entry.val)
            for entry in sc_val.map.sc_map
        }

    raise ValueError(f"Unsupported SCVal type: {sc_type}")


def serialize_value(value: Any) -> Any:
    """
    Make a native value JSON safe.

    Bytes become lowercase hex, integers outside the safe JSON range become
    decimal strings, and lists and dicts are converted element by element.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()

    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]

    if isinstance(value, bool):
        return value

    if isinstance(value, int):
        return str(value) if abs(value) > MAX_SAFE_INTEGER else value

    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}

    return value
