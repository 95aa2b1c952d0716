"""
The custom exceptions used throughout bitverify
"""
__all__ = ["StreamError", "ReadError", "WriteError", "UnsupportedTxError", "OpCodeError", "ScriptEngineError",
           "BitNumError", "BitStackError", "SignatureError", "PubKeyError", "ECDSAError", "TxSourceError"]


class StreamError(Exception):
    """
    Catchall for stream errors
    """
    pass


class ReadError(StreamError):
    """
    For when trying to read data of length n from the stream and receiving data of length < n, or when bytes remain
    after a complete transaction has been read
    """
    pass


class WriteError(StreamError):
    """
    For when writing data that would be otherwise out of bounds
    """
    pass


class UnsupportedTxError(Exception):
    """
    For transaction encodings we recognize but do not handle (e.g. unknown segwit flag values)
    """
    pass


class OpCodeError(Exception):
    """
    For unknown mnemonics when assembling a script
    """
    pass


class ScriptEngineError(Exception):
    """
    For use in the script engine and validator, when a token cannot be interpreted or context items are missing.
    Never used for a script that simply fails.
    """
    pass


class BitNumError(Exception):
    """
    For use in the BitNum class
    """
    pass


class BitStackError(Exception):
    """
    For use in the BitStack class
    """
    pass


class SignatureError(Exception):
    """
    For signatures that cannot be decoded
    """
    pass


class PubKeyError(Exception):
    """
    Used for Pubkey errors
    """
    pass


class ECDSAError(Exception):
    """
    Raised during ECDSA operations for out of bounds values
    """
    pass


class TxSourceError(Exception):
    """
    Raised by a transaction source when a transaction or block cannot be found
    """
    pass
