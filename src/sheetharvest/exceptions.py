"""Base exception for SheetHarvest."""


class SheetHarvestError(Exception):
    """Base class for all errors raised by SheetHarvest."""

    pass
