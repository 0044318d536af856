"""OpenBandi - public grant ("bando") management toolkit.

Bank statement import and bank-transaction-to-expense reconciliation for
projects funded by Italian public grants.
"""

__version__ = "0.3.0"
__author__ = "OpenBandi Contributors"
