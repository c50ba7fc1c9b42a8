"""
Dairy procurement CLI.

Operate the pricing kernel from the shell: create tables, seed master data
from YAML, import and recalculate collections, toggle bill-period locks and
print farmer bills.

Entry point: python -m scripts.dairy_cli <command>
"""
