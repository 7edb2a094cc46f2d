"""Version information for the LOLDrivers catalog."""

__version__ = "0.3.0"
