"""Serialization of xmltree nodes back to XML source text."""

from .serializer import XMLSerializer

__all__ = ["XMLSerializer"]
