"""Verifying building blocks for an Ethereum light client: SSZ, RLP, proofs and checked RPC data."""

__version__ = "0.2.0"