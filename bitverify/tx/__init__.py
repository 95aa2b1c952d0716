"""
tx folder used to house the transaction model
"""

# tx/__init__.py
from bitverify.tx.tx import *
