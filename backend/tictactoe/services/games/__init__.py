"""Game domain services: board rules, turn engine, history statistics and
the record store.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics. Only ``gateway`` talks to the database.
"""
