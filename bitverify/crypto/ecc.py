"""
Elliptic Curve Class

Only secp256k1 is used for signature verification. See https://www.secg.org/sec2-v2.pdf for constants.
"""
import json

from bitverify.crypto.ecc_math import is_quadratic_residue, modular_sqrt

__all__ = ["EllipticCurve", "secp256k1", "SECP256K1"]


class EllipticCurve:

    def __init__(self, a: int, b: int, p: int, order: int, generator: tuple):
        """
        We instantiate an elliptic curve E of the form

            y^2 = x^3 + ax + b (mod p).

        We let E(F_p) denote the corresponding cyclic abelian group, comprised of the rational points of E and the
        point at infinity (represented by None). The order variable refers to the order of this group.
        """
        self.a = a
        self.b = b
        self.p = p
        self.order = order
        self.generator = generator

    def __repr__(self):
        gx, gy = self.generator
        return json.dumps({
            'a': hex(self.a),
            'b': hex(self.b),
            'p': hex(self.p),
            'order': hex(self.order),
            'generator': (hex(gx), hex(gy))
        })

    def x_terms(self, x: int) -> int:
        """Compute x^3 + ax + b mod p."""
        return (pow(x, 3, self.p) + self.a * x + self.b) % self.p

    # --- Points on curve --- #

    def is_point_on_curve(self, point: tuple | None) -> bool:
        if point is None:
            return True
        x, y = point
        return (self.x_terms(x) - pow(y, 2, self.p)) % self.p == 0

    def is_x_on_curve(self, x: int) -> bool:
        """
        A residue x is on the curve E iff x^3 + ax + b is a quadratic residue modulo p.
        """
        return is_quadratic_residue(self.x_terms(x), self.p)

    def find_y_from_x(self, x: int) -> int:
        """
        Return the smaller y such that (x, y) is on the curve. Note that if (x, y) is a point, then (x, p-y) is also
        a point.
        """
        if not self.is_x_on_curve(x):
            raise ValueError(f"Given x coordinate {x} is not on the curve.")
        y = modular_sqrt(self.x_terms(x), self.p)
        return min(y, -y % self.p)

    # --- Group operations --- #

    def add_points(self, point1: tuple | None, point2: tuple | None):
        """
        Adding points using the elliptic curve addition rules.
        """
        # Point at infinity cases
        if point1 is None:
            return point2
        if point2 is None:
            return point1

        x1, y1 = point1
        x2, y2 = point2

        if x1 == x2:
            if (y1 + y2) % self.p == 0:  # Points are inverses, or a point on the x-axis doubled
                return None
            m = ((3 * x1 * x1 + self.a) * pow(2 * y1, -1, self.p)) % self.p
        else:
            m = ((y2 - y1) * pow(x2 - x1, -1, self.p)) % self.p

        x3 = (m * m - x1 - x2) % self.p
        y3 = (m * (x1 - x3) - y1) % self.p
        return x3, y3

    def scalar_multiplication(self, n: int, point: tuple | None):
        """
        We use the double-and-add algorithm to add a point P with itself n times, reading the bits of n from least
        to most significant.
        """
        if point is None:
            return None

        n = n % self.order
        if n == 0:
            return None

        result = None
        temp_point = point
        while n > 0:
            if n & 1:
                result = self.add_points(result, temp_point)
            temp_point = self.add_points(temp_point, temp_point)
            n >>= 1

        if not self.is_point_on_curve(result):
            raise ValueError("Serious error. Calculated point not on curve.")
        return result

    def multiply_generator(self, n: int):
        return self.scalar_multiplication(n, self.generator)


def secp256k1():
    a = 0
    b = 7
    p = pow(2, 256) - pow(2, 32) - pow(2, 9) - pow(2, 8) - pow(2, 7) - pow(2, 6) - pow(2, 4) - 1
    order = 0xfffffffffffffffffffffffffffffffebaaedce6af48a03bbfd25e8cd0364141
    generator = (0x79be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798,
                 0x483ada7726a3c4655da4fbfc0e1108a8fd17b448a68554199c47d08ffb10d4b8)
    return EllipticCurve(a, b, p, order, generator)


SECP256K1 = secp256k1()
