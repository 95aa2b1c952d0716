"""
The opcode implementations, grouped by family. Signature opcodes and flow control are handled in the ScriptEngine.
"""
