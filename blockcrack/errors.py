"""Exceptions raised by the mode engine and the attacks.

Contract violations (wrong key/IV length, misaligned ciphertext) are plain
ValueErrors and are not listed here."""

class PaddingError(ValueError):
    """Decrypted data does not end in valid PKCS#7 padding"""
    pass

class AttackError(Exception):
    """An attack could not make progress: the oracle answered inconsistently,
    or an assumption about block size, mode or alignment did not hold."""
    pass
