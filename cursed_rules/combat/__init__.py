"""
Combat module of the rules engine.

Turn action economy, the action resolver with its configure/roll flow, and
the best-effort roll log.
"""
