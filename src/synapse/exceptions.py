from __future__ import annotations


class SynapseError(Exception):
    """
    Base class for errors raised by the synapse library.
    """


class GenerationError(SynapseError):
    """
    The generative model call itself failed (transport, quota, auth).

    Distinct from an empty extraction result, which is not an error.
    """


class DocumentError(SynapseError):
    """
    An uploaded document could not be read.
    """


class StoreError(SynapseError):
    """
    The key/value backend rejected or lost an operation.
    """
