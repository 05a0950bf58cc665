"""Multiparty protocols between asynchronous roles, worked protocols and an HTTP cache."""

__version__ = "0.1.0"