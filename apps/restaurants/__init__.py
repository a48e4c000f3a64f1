"""
Restaurants App - Restaurant Catalog

Read-only catalog of partner restaurants. The ledger and ranking apps hold
only references to these rows; restaurants are created and edited through
the Django admin.
"""
