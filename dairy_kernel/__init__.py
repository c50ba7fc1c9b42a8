"""
Dairy Kernel - milk procurement pricing core

A period-locked collection ledger with:
- Time-versioned rate configurations
- Farmer-specific incentive/deduction overrides
- Slab-based incentives, deductions and bonuses
- Bill-period locking of finalized collections
"""

__version__ = "0.1.0"
