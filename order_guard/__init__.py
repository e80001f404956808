"""Order blocking and availability rules for multi-platform inventory."""

__version__ = "0.1.0"
