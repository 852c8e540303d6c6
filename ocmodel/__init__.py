"""Versioned type names, matchable identities, typed JSON documents and component descriptors."""

__version__ = "0.1.0"