"""
crypto folder used to house hash functions, the secp256k1 curve, ECDSA and signature/public key decoding
"""

# crypto/__init__.py
from bitverify.crypto.der import *
from bitverify.crypto.ecc import *
from bitverify.crypto.ecdsa import *
from bitverify.crypto.hash_functions import *
from bitverify.crypto.pubkey import *
