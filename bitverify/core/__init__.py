"""
core folder used to house the stream codec, protocol constants, exceptions and logging
"""

# core/__init__.py
from bitverify.core.byte_stream import *
from bitverify.core.exceptions import *
from bitverify.core.formats import *
from bitverify.core.logging import *
from bitverify.core.serializable import *
