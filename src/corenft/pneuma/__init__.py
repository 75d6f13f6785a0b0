"""
Pneuma - On-chain interaction layer for corenft.

Node channel, protobuf encoding registry, client context / transaction
factory, NFT message builders, and the sign-submit-await pipeline.

Uses httpx against the node's REST gateway and protobuf for the wire
format of transactions.
"""
