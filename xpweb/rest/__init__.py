"""REST API client."""

from .client import RestClient, encode_dataref_value

__all__ = ["RestClient", "encode_dataref_value"]
