"""Peer-to-peer book exchange: listings, exchange requests and conversations."""

__version__ = "0.1.0"
