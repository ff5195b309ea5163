# Services package init
"""
RoadRater Backend — Services Layer
====================================

Service Inventory:
    - RatingService: atomic rating submission, per-segment feed + statistics
    - RoadService:   paginated segment list, segment detail, top-5 leaderboard
    - AuthService:   registration, login, profile lookup

Each service is constructed per request around the injected Database
gateway (see dependencies.py); none of them holds mutable state.
"""
