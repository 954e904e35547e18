"""Domain layer (pure logic).

- Keep economy rules and calculations here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Redis.
- Deterministic functions only (the wall clock is injected where a timestamp is needed).
"""
