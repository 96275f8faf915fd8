"""Wallet vault core: encrypted secret storage and balance aggregation."""
