"""
script folder used to house the asm parser, the stack, the opcode functions and the ScriptEngine
"""

# script/__init__.py
from bitverify.script.context import *
from bitverify.script.opcode_map import *
from bitverify.script.parser import *
from bitverify.script.script_engine import *
from bitverify.script.stack import *
