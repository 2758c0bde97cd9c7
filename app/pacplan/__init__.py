"""pacplan - update reconciliation and capacity planning for Arch-style hosts."""

__version__ = "0.4.0"
