"""
                OrderPad Voice Orders

Restaurant order taking by voice: staff record a spoken order, it is
transcribed and reduced to meal and drink items, and the resulting orders
are tracked (table, guests, open/closed) in a local store.

Author: OrderPad Team
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "OrderPad Team"
