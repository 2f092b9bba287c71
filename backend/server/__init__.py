"""Server — config, storage, caching and sync plumbing shared by every feature package.

The ASGI app lives in ``server.app`` (run with ``uvicorn server.app:app``).
"""
