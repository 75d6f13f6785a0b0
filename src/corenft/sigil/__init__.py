"""
Sigil - signing identity for corenft.

HD-derived secp256k1 keys held in a volatile in-memory keyring.
"""
