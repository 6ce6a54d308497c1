"""
Argument resolution for oracle-proposed tool calls.

Runs before a tool's typed arguments are decoded:
    1. inject the caller's wallet into wallet/recipient/owner parameters left empty
    2. reject calls still missing a required parameter
    3. resolve token symbols to addresses (case-insensitive)
    4. reject malformed addresses and amounts, normalising amounts to decimal strings
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

from ...config import settings
from ...providers.llm.base import ParameterRole, ToolDefinition, ToolParameterType
from ...services.address import is_evm_address
from ...services.tokens import build_symbol_table
from .errors import (
    MalformedAddressError,
    MalformedAmountError,
    MissingParameterError,
    UnresolvableTokenError,
)

ADDRESS_ROLES = frozenset({
    ParameterRole.WALLET,
    ParameterRole.RECIPIENT,
    ParameterRole.OWNER,
    ParameterRole.SPENDER,
    ParameterRole.ADDRESS,
})

# Roles the caller's own wallet is a sensible default for
CALLER_DEFAULT_ROLES = frozenset({
    ParameterRole.WALLET,
    ParameterRole.RECIPIENT,
    ParameterRole.OWNER,
})


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple)) and not value:
        return True
    return False


def normalize_amount(value: Any, parameter: str) -> str:
    """Positive decimal amount as a plain string, e.g. ``1e-1`` -> ``0.1``."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float, Decimal)):
        raise MalformedAmountError(parameter, value)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise MalformedAmountError(parameter, value)
    if not amount.is_finite() or amount <= 0:
        raise MalformedAmountError(parameter, value)
    return format(amount, "f")


class ArgumentResolver:
    """Turns partial, symbolic oracle arguments into canonical ones."""

    def __init__(
        self,
        symbol_table: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        table = symbol_table if symbol_table is not None else build_symbol_table(settings.extra_token_symbols)
        self._symbols: Dict[str, str] = {symbol.upper(): address for symbol, address in table.items()}
        self.logger = logger or logging.getLogger(__name__)

    @property
    def known_symbols(self) -> List[str]:
        return sorted(self._symbols)

    def resolve_token_identifier(self, value: Any, param_name: str) -> str:
        """Symbol -> address; addresses pass through unchanged."""
        if isinstance(value, str):
            candidate = value.strip()
            mapped = self._symbols.get(candidate.upper())
            if mapped:
                return mapped
            if is_evm_address(candidate):
                return candidate
        raise UnresolvableTokenError(param_name, value, self._symbols.keys())

    def inject_defaults(
        self,
        definition: ToolDefinition,
        args: Dict[str, Any],
        caller_address: Optional[str],
    ) -> Dict[str, Any]:
        """Fill wallet-like parameters the oracle left empty with the caller's address."""
        resolved = dict(args)
        if not caller_address:
            return resolved
        for param in definition.parameters:
            if param.role in CALLER_DEFAULT_ROLES and _is_empty(resolved.get(param.name)):
                resolved[param.name] = caller_address
                self.logger.debug(f"Injected caller address into {definition.name}.{param.name}")
        return resolved

    def validate_required(self, definition: ToolDefinition, args: Dict[str, Any]) -> None:
        for name in definition.required_parameters:
            if _is_empty(args.get(name)):
                raise MissingParameterError(name)

    def resolve(
        self,
        definition: ToolDefinition,
        raw_args: Optional[Dict[str, Any]],
        caller_address: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Full pipeline; raises a ToolArgumentError subclass on the first problem."""
        args = self.inject_defaults(definition, raw_args or {}, caller_address)
        self.validate_required(definition, args)

        for param in definition.parameters:
            value = args.get(param.name)
            if _is_empty(value):
                # Optional and absent: let the typed record apply its default.
                args.pop(param.name, None)
                continue

            if param.type == ToolParameterType.ARRAY and isinstance(value, str):
                value = [item.strip() for item in value.split(",") if item.strip()]

            if param.role == ParameterRole.TOKEN:
                if isinstance(value, list):
                    value = [self.resolve_token_identifier(item, param.name) for item in value]
                else:
                    value = self.resolve_token_identifier(value, param.name)
            elif param.role in ADDRESS_ROLES:
                if not is_evm_address(value):
                    raise MalformedAddressError(param.name, value)
                value = value.strip()
            elif param.role == ParameterRole.AMOUNT:
                value = normalize_amount(value, param.name)

            args[param.name] = value

        return args
