"""Live U.S. national debt dashboard backed by the Treasury FiscalData API."""

__version__ = "0.1.0"
