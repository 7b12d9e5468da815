"""
textchain: Auditable text transformation pipelines.

Runs an ordered chain of find/replace and language-model rewrite steps
over a block of text, recording every step in a durable ledger.
"""

__version__ = "0.1.0"
