"""Endpoint descriptors and refresh policies."""

from wsdottie.endpoints.models import EndpointDescriptor, ServiceFamily
from wsdottie.endpoints.policies import RefreshPolicy, RefreshProfile, profile_for


__all__ = [
    "EndpointDescriptor",
    "RefreshPolicy",
    "RefreshProfile",
    "ServiceFamily",
    "profile_for",
]
