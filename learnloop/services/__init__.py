"""Services Layer — stateful stores and the content pipeline around the pure core.

Invariants:
    - Stores mutate synchronously in memory and persist only through flush()
    - All persistence goes through the KeyValueStore protocol, never a concrete backend
    - The staged compiler orchestrates a ContentCompiler; it never authors content itself
"""
