"""Errors raised while resolving and executing tool calls.

None of these escape the tool executor: each is folded into an error
ToolResult so the oracle can react on its next turn.
"""

from typing import Iterable


class ToolArgumentError(ValueError):
    """Arguments proposed by the oracle could not be made canonical"""

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(message)


class UnresolvableTokenError(ToolArgumentError):
    def __init__(self, parameter: str, value: object, known_symbols: Iterable[str]):
        self.value = value
        self.known_symbols = sorted(known_symbols)
        super().__init__(
            parameter,
            f"Could not resolve token {value!r} for parameter '{parameter}'. "
            f"Use a token address (0x...) or one of the known symbols: {', '.join(self.known_symbols)}",
        )


class MissingParameterError(ToolArgumentError):
    def __init__(self, parameter: str):
        super().__init__(parameter, f"Missing required parameter '{parameter}'")


class MalformedAddressError(ToolArgumentError):
    def __init__(self, parameter: str, value: object):
        self.value = value
        super().__init__(parameter, f"Parameter '{parameter}' is not a valid address: {value!r}")


class MalformedAmountError(ToolArgumentError):
    def __init__(self, parameter: str, value: object):
        self.value = value
        super().__init__(parameter, f"Parameter '{parameter}' must be a positive decimal amount, got {value!r}")


class ToolExecutionError(Exception):
    """A tool's collaborator failed or signalled an error"""


class InvalidTransactionError(ToolExecutionError):
    """An action tool produced something that is not a signable transaction"""
