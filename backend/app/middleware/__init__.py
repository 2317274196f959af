# Middleware package init
"""
CampFinder Backend — Middleware Package
=========================================

Execution order for an incoming request (last added in create_app runs first):

    RequestID → RateLimit → RequestLogging → GZip → CORS → route

    - request_id.py:  X-Request-ID in, ContextVar for handlers/loggers, header out
    - rate_limit.py:  per-client sliding window, 429 with Retry-After
    - logging.py:     one access line per request, level chosen by status
"""
