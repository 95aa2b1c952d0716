"""
bitverify: script and signature validation for Bitcoin transactions
"""
from bitverify.core import *
from bitverify.script import *
from bitverify.tx import *
from bitverify.validation import *

__version__ = "0.1.0"
