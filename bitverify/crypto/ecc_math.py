"""
Helper functions for the mathematics of elliptic curves
"""

__all__ = ["legendre_symbol", "is_quadratic_residue", "modular_sqrt"]


def legendre_symbol(r: int, p: int) -> int:
    """
    Returns (r | p) = {
        0 if r % p == 0
        1 if r % p != 0 and r is a quadratic residue mod p
        -1 if r % p != 0 and r is a quadratic non-residue mod p
    }
    We use Euler's criterion which states:
        (r | p) = r^((p-1)/2) (mod p)
    """
    if r % p == 0:
        return 0
    criterion = pow(r, (p - 1) // 2, p)
    return -1 if criterion == p - 1 else 1


def is_quadratic_residue(n: int, p: int) -> bool:
    """
    Returns True if (n|p) != -1. (We include 0 as quadratic residues.)
    """
    return legendre_symbol(n, p) != -1


def modular_sqrt(n: int, p: int) -> int:
    """
    Returns r such that r^2 = n (mod p) for a prime p = 3 (mod 4), which covers secp256k1.

    Raises ValueError when n is a non-residue.
    """
    if p % 4 != 3:
        raise ValueError("modular_sqrt only supports primes p = 3 (mod 4)")
    if not is_quadratic_residue(n, p):
        raise ValueError("modular_sqrt called on quadratic non-residue")
    return pow(n, (p + 1) // 4, p)
