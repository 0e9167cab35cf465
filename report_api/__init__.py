"""
Read-only reporting API.

Exposes company balances, campaigns, equipment leases, client performance,
PR materials and employee rosters from PostgreSQL as JSON endpoints.
"""

__version__ = "1.0.0"
