"""
EDU bridging: BSC -> Arbitrum One over the LayerZero OFT adapter, and
Arbitrum One -> EDU Chain through the canonical bridge.
"""

import logging
from typing import Any, Dict

import httpx

from ..providers.base import ProviderError
from ..providers.cryptocompare import CryptoCompareProvider
from ..providers.rpc import EvmRpcProvider
from ..services.abi import (
    MAX_UINT256,
    address_to_bytes32,
    decode_uint,
    encode_adapter_params,
    encode_call,
    from_base_units,
    to_base_units,
    to_positive_base_units,
)
from ..services.address import checksum
from ..services.chains import (
    ARB_EDU_TOKEN_ADDRESS,
    ARB_TO_EDU_BRIDGE_ADDRESS,
    ARBITRUM_CHAIN_ID,
    BSC_CHAIN_ID,
    BSC_EDU_OFT_ADDRESS,
    BSC_EDU_TOKEN_ADDRESS,
    LAYERZERO_ARBITRUM_CHAIN_ID,
)
from ..services.erc20 import erc20_allowance, erc20_balance_of, erc20_decimals

logger = logging.getLogger(__name__)

DEFAULT_EDU_DECIMALS = 18

# LayerZero relayer settings for the OFT hop
ADAPTER_PARAMS_VERSION = 2
DESTINATION_GAS_LIMIT = 500_000
DEFAULT_GAS_ON_DESTINATION = "0.0005"
DEFAULT_BRIDGE_FEE_BNB = "0.003"

ESTIMATE_SEND_FEE = "estimateSendFee(uint16,bytes,uint256,bool,bytes)"
SEND_FROM = "sendFrom(address,uint16,bytes,uint256,address,address,bytes)"


async def _edu_decimals(rpc: EvmRpcProvider, token: str) -> int:
    try:
        return await erc20_decimals(rpc, token)
    except (ProviderError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"Falling back to {DEFAULT_EDU_DECIMALS} decimals for EDU at {token}: {e}")
        return DEFAULT_EDU_DECIMALS


# ----------------------------------------------------------------------
# BSC -> Arbitrum One
# ----------------------------------------------------------------------

async def get_bnb_price(prices: CryptoCompareProvider) -> Dict[str, Any]:
    """BNB spot price, used to show the bridge fee in USD"""
    return {"symbol": "BNB", "priceUsd": await prices.get_price_usd("BNB"), "source": "cryptocompare"}


def _oft_send_args(address: str, gas_on_destination: str):
    airdrop = to_base_units(gas_on_destination, 18)
    adapter_params = encode_adapter_params(ADAPTER_PARAMS_VERSION, DESTINATION_GAS_LIMIT, airdrop, address)
    return address_to_bytes32(address), adapter_params


async def _estimate_native_fee(
    rpc: EvmRpcProvider,
    amount_units: int,
    address: str,
    gas_on_destination: str,
) -> int:
    to_address, adapter_params = _oft_send_args(address, gas_on_destination)
    data = encode_call(
        ESTIMATE_SEND_FEE, LAYERZERO_ARBITRUM_CHAIN_ID, to_address, amount_units, False, adapter_params
    )
    return decode_uint(await rpc.call(BSC_EDU_OFT_ADDRESS, data))


async def estimate_bsc_bridge_fee(
    rpc: EvmRpcProvider,
    amount: str,
    address: str,
    gas_on_destination: str = DEFAULT_GAS_ON_DESTINATION,
) -> Dict[str, Any]:
    """LayerZero messaging fee, in BNB, for sending ``amount`` EDU to Arbitrum"""
    decimals = await _edu_decimals(rpc, BSC_EDU_TOKEN_ADDRESS)
    fee = await _estimate_native_fee(rpc, to_positive_base_units(amount, decimals), address, gas_on_destination)
    return {
        "amount": amount,
        "nativeFee": fee,
        "formattedFee": from_base_units(fee, 18),
        "feeSymbol": "BNB",
        "gasOnDestination": gas_on_destination,
        "chainId": BSC_CHAIN_ID,
    }


async def check_bsc_bnb_balance(rpc: EvmRpcProvider, wallet_address: str, fee: str) -> Dict[str, Any]:
    """Whether the wallet can pay ``fee`` BNB for the bridge message"""
    balance = await rpc.get_balance(wallet_address)
    required = to_base_units(fee, 18)
    return {
        "address": checksum(wallet_address),
        "balance": balance,
        "formattedBalance": from_base_units(balance, 18),
        "required": required,
        "sufficient": balance >= required,
        "chainId": BSC_CHAIN_ID,
    }


async def check_bsc_edu_balance(rpc: EvmRpcProvider, wallet_address: str, amount: str) -> Dict[str, Any]:
    """Whether the wallet holds at least ``amount`` EDU on BSC"""
    decimals = await _edu_decimals(rpc, BSC_EDU_TOKEN_ADDRESS)
    balance = await erc20_balance_of(rpc, BSC_EDU_TOKEN_ADDRESS, wallet_address)
    required = to_base_units(amount, decimals)
    return {
        "address": checksum(wallet_address),
        "balance": balance,
        "formattedBalance": from_base_units(balance, decimals),
        "required": required,
        "sufficient": balance >= required,
        "chainId": BSC_CHAIN_ID,
    }


async def check_bsc_edu_allowance(rpc: EvmRpcProvider, owner_address: str, amount: str) -> Dict[str, Any]:
    """Whether the OFT adapter may already pull ``amount`` EDU from the owner"""
    decimals = await _edu_decimals(rpc, BSC_EDU_TOKEN_ADDRESS)
    allowance = await erc20_allowance(rpc, BSC_EDU_TOKEN_ADDRESS, owner_address, BSC_EDU_OFT_ADDRESS)
    required = to_base_units(amount, decimals)
    return {
        "owner": checksum(owner_address),
        "spender": BSC_EDU_OFT_ADDRESS,
        "allowance": allowance,
        "formattedAllowance": from_base_units(allowance, decimals),
        "required": required,
        "approved": allowance >= required,
        "chainId": BSC_CHAIN_ID,
    }


def prepare_approve_edu_on_bsc() -> Dict[str, Any]:
    """Unlimited approval of BSC EDU to the OFT adapter"""
    return {
        "to": BSC_EDU_TOKEN_ADDRESS,
        "data": encode_call("approve(address,uint256)", BSC_EDU_OFT_ADDRESS, MAX_UINT256),
        "value": 0,
        "chainId": BSC_CHAIN_ID,
        "description": "Approve EDU tokens on BSC for bridging",
    }


async def prepare_bridge_bsc_to_arb(
    rpc: EvmRpcProvider,
    amount: str,
    address: str,
    gas_on_destination: str = DEFAULT_GAS_ON_DESTINATION,
) -> Dict[str, Any]:
    """``sendFrom`` on the OFT adapter; the BNB fee travels as the tx value.

    When the fee cannot be estimated a flat 0.003 BNB is attached; LayerZero
    refunds any excess to ``address``.
    """
    decimals = await _edu_decimals(rpc, BSC_EDU_TOKEN_ADDRESS)
    amount_units = to_positive_base_units(amount, decimals)
    to_address, adapter_params = _oft_send_args(address, gas_on_destination)

    try:
        fee = await _estimate_native_fee(rpc, amount_units, address, gas_on_destination)
    except (ProviderError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"BSC bridge fee estimation failed, attaching {DEFAULT_BRIDGE_FEE_BNB} BNB: {e}")
        fee = to_base_units(DEFAULT_BRIDGE_FEE_BNB, 18)

    data = encode_call(
        SEND_FROM,
        address,
        LAYERZERO_ARBITRUM_CHAIN_ID,
        to_address,
        amount_units,
        address,
        address,
        adapter_params,
    )
    return {
        "to": BSC_EDU_OFT_ADDRESS,
        "data": data,
        "value": fee,
        "chainId": BSC_CHAIN_ID,
        "description": (
            f"Bridge {amount} EDU from BSC to Arbitrum (includes {from_base_units(fee, 18)} BNB fee)"
        ),
    }


# ----------------------------------------------------------------------
# Arbitrum One -> EDU Chain
# ----------------------------------------------------------------------

async def check_arb_edu_allowance(rpc: EvmRpcProvider, owner_address: str, amount: str) -> Dict[str, Any]:
    """Whether the bridge may already pull ``amount`` EDU from the owner"""
    decimals = await _edu_decimals(rpc, ARB_EDU_TOKEN_ADDRESS)
    allowance = await erc20_allowance(rpc, ARB_EDU_TOKEN_ADDRESS, owner_address, ARB_TO_EDU_BRIDGE_ADDRESS)
    required = to_base_units(amount, decimals)
    return {
        "owner": checksum(owner_address),
        "spender": ARB_TO_EDU_BRIDGE_ADDRESS,
        "allowance": allowance,
        "formattedAllowance": from_base_units(allowance, decimals),
        "required": required,
        "approved": allowance >= required,
        "chainId": ARBITRUM_CHAIN_ID,
    }


async def check_arb_edu_balance(rpc: EvmRpcProvider, wallet_address: str, amount: str) -> Dict[str, Any]:
    """Whether the wallet holds at least ``amount`` EDU on Arbitrum"""
    decimals = await _edu_decimals(rpc, ARB_EDU_TOKEN_ADDRESS)
    balance = await erc20_balance_of(rpc, ARB_EDU_TOKEN_ADDRESS, wallet_address)
    required = to_base_units(amount, decimals)
    return {
        "address": checksum(wallet_address),
        "balance": balance,
        "formattedBalance": from_base_units(balance, decimals),
        "required": required,
        "sufficient": balance >= required,
        "chainId": ARBITRUM_CHAIN_ID,
    }


def prepare_approve_edu_on_arb() -> Dict[str, Any]:
    """Unlimited approval of Arbitrum EDU to the bridge contract"""
    return {
        "to": ARB_EDU_TOKEN_ADDRESS,
        "data": encode_call("approve(address,uint256)", ARB_TO_EDU_BRIDGE_ADDRESS, MAX_UINT256),
        "value": 0,
        "chainId": ARBITRUM_CHAIN_ID,
        "description": "Approve the Arbitrum -> EDU Chain bridge to transfer your EDU",
    }


async def prepare_bridge_arb_to_edu(rpc: EvmRpcProvider, amount: str) -> Dict[str, Any]:
    """``depositERC20`` on the bridge; EDU arrives as native EDU on EDU Chain"""
    decimals = await _edu_decimals(rpc, ARB_EDU_TOKEN_ADDRESS)
    return {
        "to": ARB_TO_EDU_BRIDGE_ADDRESS,
        "data": encode_call("depositERC20(uint256)", to_positive_base_units(amount, decimals)),
        "value": 0,
        "chainId": ARBITRUM_CHAIN_ID,
        "description": f"Bridge {amount} EDU from Arbitrum One to EDU Chain",
    }
