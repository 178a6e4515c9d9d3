"""Net Pay - take-home pay estimates from hours, rates and allowances."""

__version__ = "0.3.0"
