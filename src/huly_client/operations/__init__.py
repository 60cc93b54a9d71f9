"""Huly domain operations grouped by area.

Every operation has the signature ``async def op(client, params) -> dict`` and
raises ``HulyError`` subclasses on failure.
"""
