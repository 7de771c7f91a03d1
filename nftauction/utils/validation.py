"""
Input Validation - Bounds and format checks for external inputs.

Provides validation for values that cross into the chain from callers
(transaction fields, CLI arguments) to prevent:
- Integer overflows past uint256
- Negative amounts
- Malformed addresses
"""

from typing import Any, Tuple

from nftauction.crypto import is_valid_address

# =============================================================================
# Constants
# =============================================================================

MAX_UINT256 = 2**256 - 1


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_UINT256,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is a subclass of int but never a valid amount
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_uint256(value: Any, name: str = "value") -> Tuple[bool, str]:
    """Validate an unsigned 256-bit integer."""
    return validate_integer(value, name, 0, MAX_UINT256)


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False, f"{name} must be str, got {type(address).__name__}"
    if not is_valid_address(address):
        return False, f"{name} is not a valid address: {address!r}"
    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_uint256",
    "validate_address",
    "MAX_UINT256",
]
