# Routes package init
"""
RoadRater Backend — API Routes Package
========================================

Route Inventory:
    - health.py:   GET  /health
    - auth.py:     POST /auth/register, POST /auth/login, GET /auth/me
    - roads.py:    GET  /roads, GET /roads/{road_id}, GET /top5
    - ratings.py:  POST /ratings, GET /ratings/{segment_id}

Routes stay thin: pull values out of the request, call a service, wrap the
result in the success envelope. Errors propagate to the handlers in main.py.
"""
