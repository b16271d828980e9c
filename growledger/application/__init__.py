"""
Application layer - use cases, DTOs and service factories.

API handlers call use cases for multi-step flows (run creation, archive,
recipe changes, clean queue) and the ledger services for single operations.
"""
