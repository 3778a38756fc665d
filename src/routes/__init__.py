"""
API Routes Package
==================
Shared route utilities kept out of api.py.

Modules:
  helpers  - service wiring, caller identity, window parsing, error shaping
"""
