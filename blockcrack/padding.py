from .cipher import BLOCK_SIZE
from .errors import PaddingError

"""PKCS#7 padding"""

def pad_PKCS7(unpadded, block_size=BLOCK_SIZE):
    """Pad to given block size according to PKCS#7 standard. Block-aligned
    input gets a full block of padding, so padding is always removable."""
    mod_len = len(unpadded)%block_size
    num_bytes_needed = block_size-mod_len
    padding = bytes([num_bytes_needed]*num_bytes_needed)
    return bytes(unpadded)+padding

def strip_PKCS7(padded, block_size=BLOCK_SIZE):
    """Validate and strip PKCS#7 padding. Returns None if the padding is
    invalid, including for empty or misaligned input."""
    if len(padded) == 0 or len(padded)%block_size != 0:
        return None
    last_byte = padded[-1]
    if last_byte>0 and last_byte<=block_size:
        test_pad = padded[-last_byte:]
        if set(test_pad)=={last_byte}:
            return bytes(padded[:-last_byte])
    return None

def is_PKCS7_valid(padded, block_size=BLOCK_SIZE):
    return strip_PKCS7(padded, block_size=block_size) is not None

def unpad_PKCS7(padded, block_size=BLOCK_SIZE):
    """Unpad according to PKCS#7 standard. Raises PaddingError if string has
    invalid padding"""
    unpadded = strip_PKCS7(padded, block_size=block_size)
    if unpadded is None:
        raise PaddingError('Invalid PKCS#7 padding detected')
    return unpadded
