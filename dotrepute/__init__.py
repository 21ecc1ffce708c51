"""
dotrepute: bounded, auditable reputation scoring for on-chain accounts.

Combines governance, staking, identity and community signals under a
validated weighting scheme, applies time decay and penalties, and keeps an
append-only per-account history of score snapshots.
"""

__version__ = "0.1.0"
