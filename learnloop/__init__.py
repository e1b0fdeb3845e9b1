"""LearnLoop Package — event-sourced PDCA learning loops and versioned lesson content.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
