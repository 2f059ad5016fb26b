"""
Operation handlers.

One deployable function per operation; each module exposes the operation
handler and a `lambda_handler` entry point.
"""
