"""ABNF grammars of the EIP-4361 message."""
