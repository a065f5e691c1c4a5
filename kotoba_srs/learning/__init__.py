"""
Learning: Item selection for adaptive review sessions.
"""

from kotoba_srs.learning.item_selector import ItemSelector

__all__ = ["ItemSelector"]
