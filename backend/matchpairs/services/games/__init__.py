"""Game domain services: deck, session store, move engine, anti-cheat,
leaderboard and idle-session sweeping.

This package contains the server-authoritative game logic that should be
imported by HTTP routes and socket handlers, keeping transport concerns
separated from core game mechanics.
"""
