"""
HVAC load and sizing engines: ACCA Manual J, S, D and T
"""

__version__ = "1.0.0"
