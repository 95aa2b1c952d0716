"""
The classes for the BitStack and BitNum
"""
import json
from collections import deque

from bitverify.core.exceptions import BitNumError, BitStackError
from bitverify.core.formats import SCRIPT

__all__ = ["BitNum", "BitStack", "cast_to_bool"]


def cast_to_bool(data: bytes) -> bool:
    """
    A stack element is false if every byte is zero, allowing the last byte to be 0x80 (negative zero). This covers
    b'', b'\\x00' and b'\\x80'.
    """
    for i, byte in enumerate(data):
        if byte != 0:
            # Negative zero
            if i == len(data) - 1 and byte == 0x80:
                return False
            return True
    return False


class BitNum:
    """
    Minimal-encoded signed-magnitude integers for Bitcoin Script.

    Bitcoin script uses a special encoding for integers:
    - Little-endian representation
    - Negative numbers set the sign bit (0x80) in the last byte
    - Zero is represented as an empty byte array
    - Operands are limited to 4 bytes; results of arithmetic may be longer
    """
    __slots__ = ("_value",)

    def __init__(self, value: int):
        if not isinstance(value, int):
            raise BitNumError("BitNum value must be an integer")
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    @staticmethod
    def _encode(n: int) -> bytes:
        if n == 0:
            return b""

        neg = n < 0
        a = -n if neg else n
        mag = a.to_bytes((a.bit_length() + 7) // 8, "little")

        # The most significant bit of the last byte is the sign; add a byte if the magnitude already uses it
        if mag[-1] & 0x80:
            return mag + (b"\x80" if neg else b"\x00")
        if neg:
            return mag[:-1] + bytes([mag[-1] | 0x80])
        return mag

    @classmethod
    def from_bytes(cls, data: bytes, max_size: int = SCRIPT.MAX_BITNUM):
        """
        Parse Bitcoin Script number (little-endian, sign bit in MSB of last byte).
        """
        if data == b'':
            return cls(0)
        if len(data) > max_size:
            raise BitNumError(f"Script number of {len(data)} bytes exceeds {max_size} byte limit")

        num = int.from_bytes(data, "little", signed=False)
        if data[-1] & 0x80:
            num &= ~(1 << (8 * len(data) - 1))  # Clear sign bit
            num = -num
        return cls(num)

    def to_bytes(self) -> bytes:
        return self._encode(self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BitNum):
            return self.value == other.value
        if isinstance(other, int):
            return self.value == other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __int__(self) -> int:
        return self.value

    def __repr__(self):
        return f"BitNum({self.value})"


class BitStack:
    """
    The data stack of the script engine. Elements are always bytes; the top of the stack is index 0 of the deque.
    """

    def __init__(self, items: list = None, max_size: int = SCRIPT.MAX_STACK):
        """
        Given a list, we apply the items from left to right, so that the first item will be at the bottom of the
        stack
        """
        self.max_size = max_size
        self.stack = deque()
        if items:
            self.pushitems(items)

    # --- Stack Properties --- #

    @property
    def height(self) -> int:
        return len(self.stack)

    @property
    def is_empty(self) -> bool:
        return self.height == 0

    @property
    def top(self) -> bytes:
        self._check_min_height()
        return self.stack[0]

    # --- Internal Validation --- #

    def _check_max_size(self, n: int = 1):
        if self.height + n > self.max_size:
            raise BitStackError("Stack operations would exceed maximum size")

    def _check_min_height(self, n: int = 1):
        if self.height < n:
            raise BitStackError(f"Stack operation needs {n} items but stack height is {self.height}")

    @staticmethod
    def _to_item(item: bytes | BitNum) -> bytes:
        if isinstance(item, BitNum):
            return item.to_bytes()
        if isinstance(item, (bytes, bytearray)):
            return bytes(item)
        raise BitStackError("Only bytes or BitNum are allowed on the BitStack")

    # --- Stack Ops --- #

    def push(self, item: bytes | BitNum):
        self._check_max_size()
        self.stack.appendleft(self._to_item(item))

    def pushitems(self, items: list):
        """
        Push items in order; the last item ends up on top
        """
        self._check_max_size(len(items))
        for item in items:
            self.stack.appendleft(self._to_item(item))

    def pushlist(self, items: list):
        """
        Push a list given top-first (as returned by popitems), restoring its order on the stack
        """
        self.pushitems(list(reversed(items)))

    def pop(self) -> bytes:
        self._check_min_height()
        return self.stack.popleft()

    def popitems(self, n: int) -> list[bytes]:
        """
        Pop n items from the stack into a list. Leftmost element is the top
        """
        self._check_min_height(n)
        return [self.stack.popleft() for _ in range(n)]

    def peek(self, index: int) -> bytes:
        """
        Return the item at depth index without removing it (0 = top)
        """
        self._check_min_height(index + 1)
        return self.stack[index]

    def remove(self, index: int) -> bytes:
        """
        Remove and return the item at depth index (0 = top)
        """
        self._check_min_height(index + 1)
        item = self.stack[index]
        del self.stack[index]
        return item

    # --- Typed Helpers --- #

    def pushbool(self, boolean: bool):
        self.push(b'\x01' if boolean else b'')

    def pushnum(self, num: int):
        self.push(BitNum(num))

    def popbool(self) -> bool:
        return cast_to_bool(self.pop())

    def popnum(self, max_size: int = SCRIPT.MAX_BITNUM) -> int:
        return BitNum.from_bytes(self.pop(), max_size).value

    def clear(self):
        self.stack.clear()

    def __len__(self) -> int:
        return self.height

    def __iter__(self):
        return iter(self.stack)

    # --- Display --- #

    def to_dict(self):
        return {i: item.hex() for i, item in enumerate(self.stack)}

    def to_json(self):
        return json.dumps(self.to_dict(), indent=2)
