"""TickerHug - Account Digest over SMS

Snapshots an OKX account (equity, key prices, running grid bots) and texts
a compact summary to the operator.
"""

__version__ = "0.1.0"
