"""
Theurgy - Command implementations for corenft.

Each module corresponds to a top-level CLI command:
- issue:  Issue an NFT class
- mint:   Mint an NFT into a class
- update: Overwrite an NFT's data
- call:   Run an operation from a JSON request body
- show:   Read a class or NFT back from the node
"""
