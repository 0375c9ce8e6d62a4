"""Typed asyncio client for the WSF and WSDOT traveler information APIs."""

__version__ = "0.1.0"
