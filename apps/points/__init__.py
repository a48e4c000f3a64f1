"""
Points App - Loyalty Points Ledger

Holds per-restaurant point balances and the append-only log of point
movements between accounts.

Key Features:
- Balance store with per-key row locking (credit/debit never go negative)
- Atomic transfers to users or restaurants with request-token idempotency
- Failed-transfer audit records
- Purchase rewards credited from scanned receipts, once per receipt
- Transfer and purchase history

Architecture:
- Models: PointsBalance, TransferRecord, Purchase
- Services: balance_store, transfer_ledger, purchase_rewards, history
- Views: thin DRF handlers translating ledger errors to HTTP responses
"""
