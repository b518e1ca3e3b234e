"""Room coordination services: registry, matchmaking, turns, endings, recovery.

This package holds the session logic imported by socket handlers and HTTP
routes, keeping transport concerns separated from the rules of play.
"""
