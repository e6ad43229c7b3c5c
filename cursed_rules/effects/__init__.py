"""
Effects module of the rules engine.

Binding vow bonuses, their manual override storage and the event bus that
announces bonus changes and resolved actions.
"""
