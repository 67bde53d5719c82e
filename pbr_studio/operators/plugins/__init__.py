"""Package initialization for plugin operators.

This package discovers plugin manifests, turns their rules into validation
rules and runs external script rules.
"""
