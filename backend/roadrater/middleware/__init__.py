# Middleware package init
"""
RoadRater Backend — Middleware Package
========================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: assigns the correlation id used by every log line
    2. Logging: one access line per request, tagged with that id
    3. GZip / CORS: Starlette built-ins, configured in main.py
"""
