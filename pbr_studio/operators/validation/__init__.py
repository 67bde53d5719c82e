"""Package initialization for validation operators.

This package holds the rule engine that scores a material, and the built-in
rules it runs before any plugin rules.
"""
