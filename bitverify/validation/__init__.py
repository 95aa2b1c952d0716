"""
validation folder used to house signature hashing, the ScriptValidator and transaction sources
"""

# validation/__init__.py
from bitverify.validation.script_validator import *
from bitverify.validation.sighash import *
from bitverify.validation.tx_source import *
