"""
act-report: monthly completed-works certificate generator.
"""

__version__ = "0.1.0"
