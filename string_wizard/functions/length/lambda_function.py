"""
Length function.

Returns the number of characters in the input string. Declares no errors.
"""

import logging

from string_wizard.contract import HandlerContext, Success
from string_wizard.functions.common import make_lambda_handler

logger = logging.getLogger(__name__)

OPERATION = "Length"


async def length_operation(input, context: HandlerContext):
    logger.info(f"Received Length operation from: {context.caller}", extra=context.log_extra())
    return Success(output={"length": len(input.string)})


lambda_handler = make_lambda_handler(OPERATION, length_operation)
