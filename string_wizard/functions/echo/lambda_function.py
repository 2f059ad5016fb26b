"""
Echo function.

Returns the input string unchanged, except for palindromes which are rejected
with the declared PalindromeException.
"""

import logging

from string_wizard.contract import HandlerContext, Success, TypedError
from string_wizard.functions.common import make_lambda_handler

logger = logging.getLogger(__name__)

OPERATION = "Echo"
PALINDROME_ERROR = "PalindromeException"


def is_palindrome(value: str) -> bool:
    """Case and content sensitive; the empty string counts."""
    return value == value[::-1]


async def echo_operation(input, context: HandlerContext):
    logger.info(f"Received Echo operation from: {context.caller}", extra=context.log_extra())

    if is_palindrome(input.string):
        return TypedError.of(PALINDROME_ERROR, message="Cannot handle palindrome")

    return Success(output={"string": input.string})


lambda_handler = make_lambda_handler(OPERATION, echo_operation)
