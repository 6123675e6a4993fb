"""Arena: pari-mutuel wagering ledger for autonomous football agents."""

__version__ = "0.1.0"
__author__ = "Arena Team"

__all__ = ["__version__", "__author__"]
