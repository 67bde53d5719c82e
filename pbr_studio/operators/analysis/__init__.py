"""Package initialization for analysis operators.

This package compares many materials at once: perceptual duplicate detection,
resolution and map coverage consistency, and tileability measurement with an
optional seam fix.
"""
