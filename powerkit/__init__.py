"""powerkit - power state monitoring over logind, ConsoleKit and UPower."""

__version__ = "1.0.0"
