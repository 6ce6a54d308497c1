"""Unsigned transfer and approval transactions."""

from typing import Any, Dict

from ..providers.rpc import EvmRpcProvider
from ..services.abi import encode_call, to_positive_base_units
from ..services.address import checksum
from ..services.chains import EDUCHAIN_CHAIN_ID, chain_name
from ..services.erc20 import erc20_decimals


def prepare_send_edu_tx(recipient: str, amount: str) -> Dict[str, Any]:
    """Native EDU transfer on EDU Chain"""
    return {
        "to": checksum(recipient),
        "data": "0x",
        "value": to_positive_base_units(amount, 18),
        "chainId": EDUCHAIN_CHAIN_ID,
        "description": f"Send {amount} EDU to {recipient}",
    }


async def prepare_send_erc20_tx(
    rpc: EvmRpcProvider,
    token_address: str,
    recipient: str,
    amount: str,
) -> Dict[str, Any]:
    """ERC-20 ``transfer`` on whichever chain ``rpc`` serves"""
    decimals = await erc20_decimals(rpc, token_address)
    return {
        "to": checksum(token_address),
        "data": encode_call("transfer(address,uint256)", recipient, to_positive_base_units(amount, decimals)),
        "value": 0,
        "chainId": rpc.chain_id,
        "description": f"Transfer {amount} of token {token_address} to {recipient} on {chain_name(rpc.chain_id)}",
    }


async def prepare_approve_tx(
    rpc: EvmRpcProvider,
    token_address: str,
    spender_address: str,
    amount: str,
) -> Dict[str, Any]:
    """ERC-20 ``approve`` for an exact amount"""
    decimals = await erc20_decimals(rpc, token_address)
    return {
        "to": checksum(token_address),
        "data": encode_call("approve(address,uint256)", spender_address, to_positive_base_units(amount, decimals)),
        "value": 0,
        "chainId": rpc.chain_id,
        "description": f"Approve {spender_address} to spend {amount} of token {token_address}",
    }
