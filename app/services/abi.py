"""
Minimal ABI encoding helpers for building calldata by hand.
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from functools import lru_cache
from typing import Iterable, List, Sequence, Union

from eth_utils import function_signature_to_4byte_selector

# Maximum uint256 for unlimited approval
MAX_UINT256 = 2**256 - 1

WORD_HEX = 64


@lru_cache(maxsize=64)
def selector(signature: str) -> str:
    """4-byte function selector as 0x-prefixed hex, e.g. ``approve(address,uint256)``."""
    return "0x" + function_signature_to_4byte_selector(signature).hex()


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"Value out of uint256 range: {value}")
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    if len(addr) != 40:
        raise ValueError(f"Invalid address: {address}")
    return addr.zfill(64)


def _encode_bytes(data: bytes) -> str:
    """Dynamic ``bytes`` tail: length word followed by right-padded data."""
    padded = data.hex()
    if len(padded) % WORD_HEX:
        padded += "0" * (WORD_HEX - len(padded) % WORD_HEX)
    return _encode_uint256(len(data)) + padded


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def encode_call(signature: str, *args: Union[int, str, bytes]) -> str:
    """Calldata for a call with ``uint``/``bool``/``address``/``bytes`` arguments.

    Strings are treated as addresses, integers as uint256 (smaller uints and
    bools share the same word layout) and ``bytes`` as dynamic ``bytes``.
    """
    head = []
    tails = []
    cursor = 32 * len(args)
    for arg in args:
        if isinstance(arg, bytes):
            tail = _encode_bytes(arg)
            head.append(_encode_uint256(cursor))
            tails.append(tail)
            cursor += len(tail) // 2
        elif isinstance(arg, str):
            head.append(_encode_address(arg))
        else:
            head.append(_encode_uint256(int(arg)))
    return selector(signature) + "".join(head) + "".join(tails)


def address_to_bytes32(address: str) -> bytes:
    """Left-pad a 20-byte address to 32 bytes (LayerZero recipient form)."""
    return bytes.fromhex(_encode_address(address))


def encode_adapter_params(version: int, gas_limit: int, gas_airdrop: int, airdrop_address: str) -> bytes:
    """LayerZero v1 adapterParams, packed as uint16 | uint256 | uint256 | address."""
    return (
        version.to_bytes(2, "big")
        + gas_limit.to_bytes(32, "big")
        + gas_airdrop.to_bytes(32, "big")
        + bytes.fromhex(_encode_address(airdrop_address)[24:])
    )


def encode_path(tokens: Sequence[str], fees: Sequence[int]) -> bytes:
    """Packed Uniswap v3 path: token (20) | fee (3) | token (20) ..."""
    if len(tokens) != len(fees) + 1:
        raise ValueError("path requires exactly one fee between each pair of tokens")
    out = bytearray()
    for index, token in enumerate(tokens):
        out += bytes.fromhex(_strip_0x(token).lower())
        if index < len(fees):
            out += fees[index].to_bytes(3, "big")
    return bytes(out)


def encode_exact_input(
    path: bytes,
    recipient: str,
    deadline: int,
    amount_in: int,
    amount_out_minimum: int,
) -> str:
    """``exactInput((bytes,address,uint256,uint256,uint256))``"""
    head = (
        _encode_uint256(5 * 32)
        + _encode_address(recipient)
        + _encode_uint256(deadline)
        + _encode_uint256(amount_in)
        + _encode_uint256(amount_out_minimum)
    )
    # The tuple is dynamic, so the call args start with its offset.
    return (
        selector("exactInput((bytes,address,uint256,uint256,uint256))")
        + _encode_uint256(32)
        + head
        + _encode_bytes(path)
    )


def encode_multicall(calls: Iterable[str]) -> str:
    """``multicall(bytes[])`` wrapping already-encoded calldata strings."""
    payloads: List[bytes] = [bytes.fromhex(_strip_0x(call)) for call in calls]
    offsets = []
    tails = []
    cursor = 32 * len(payloads)
    for payload in payloads:
        offsets.append(_encode_uint256(cursor))
        tail = _encode_bytes(payload)
        tails.append(tail)
        cursor += len(tail) // 2
    return (
        selector("multicall(bytes[])")
        + _encode_uint256(32)
        + _encode_uint256(len(payloads))
        + "".join(offsets)
        + "".join(tails)
    )


def decode_uint(result: str, index: int = 0) -> int:
    """Read the ``index``-th 32-byte word of an eth_call result as an integer."""
    raw = _strip_0x(result)
    start = index * WORD_HEX
    word = raw[start:start + WORD_HEX]
    if len(word) != WORD_HEX:
        raise ValueError("eth_call result too short")
    return int(word, 16)


def decode_string(result: str) -> str:
    """Decode an ABI ``string`` return, tolerating legacy ``bytes32`` tokens."""
    raw = _strip_0x(result)
    if len(raw) == WORD_HEX:
        return bytes.fromhex(raw).rstrip(b"\x00").decode("utf-8", errors="replace")
    offset = int(raw[:WORD_HEX], 16) * 2
    length = int(raw[offset:offset + WORD_HEX], 16)
    data = raw[offset + WORD_HEX:offset + WORD_HEX + length * 2]
    return bytes.fromhex(data).decode("utf-8", errors="replace")


def to_base_units(amount: Union[str, int, float, Decimal], decimals: int) -> int:
    """Human amount to integer base units, truncating excess precision."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise ValueError(f"Invalid amount: {amount!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals).quantize(Decimal(1), rounding=ROUND_DOWN)
    return int(scaled)


def to_positive_base_units(amount: Union[str, int, float, Decimal], decimals: int) -> int:
    """Like ``to_base_units`` but rejects amounts that truncate to zero."""
    value = to_base_units(amount, decimals)
    if value <= 0:
        raise ValueError("amount is too small for this token's decimals")
    return value


def from_base_units(value: int, decimals: int) -> str:
    """Integer base units to a plain decimal string (no exponent)."""
    with localcontext() as ctx:
        ctx.prec = 100
        quantity = Decimal(value).scaleb(-decimals)
    text = format(quantity, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def encode_quote_exact_input(path: bytes, amount_in: int) -> str:
    """QuoterV2 ``quoteExactInput(bytes,uint256)``"""
    return (
        selector("quoteExactInput(bytes,uint256)")
        + _encode_uint256(64)
        + _encode_uint256(amount_in)
        + _encode_bytes(path)
    )
