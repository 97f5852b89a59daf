import logging
from random import choice, randint

from .block import decrypt_CBC_raw, encrypt_CBC, encrypt_ECB
from .cipher import AES_BLOCK
from .padding import is_PKCS7_valid
from .utils import random_bytes

"""Black-box oracles that hold a secret key (and IV) and expose a single
operation to an attacker"""

log = logging.getLogger(__name__)

class ECBSuffixOracle(object):
    """Encrypts prefix || data || suffix under a fixed, hidden key in ECB mode.
    The prefix and suffix are unknown to whoever calls encrypt."""

    def __init__(self, suffix, prefix=b'', key=None, block_cipher=AES_BLOCK):
        if key is None:
            key = random_bytes(count=block_cipher.block_size)
        self._key = key
        self._prefix = bytes(prefix)
        self._suffix = bytes(suffix)
        self._cipher = block_cipher

    def encrypt(self, data):
        plain = self._prefix+bytes(data)+self._suffix
        return encrypt_ECB(plain, self._key, block_cipher=self._cipher)

class CBCPaddingOracle(object):
    """Holds a CBC key and IV. encrypt produces ciphertext for the victim;
    is_padding_valid is the only thing an attacker gets to see."""

    def __init__(self, key=None, iv=None, block_cipher=AES_BLOCK):
        block_size = block_cipher.block_size
        self._key = random_bytes(count=block_size) if key is None else key
        self._iv = random_bytes(count=block_size) if iv is None else iv
        self._cipher = block_cipher

    @property
    def iv(self):
        return self._iv

    def encrypt(self, plain):
        return encrypt_CBC(plain, self._key, self._iv, block_cipher=self._cipher)

    def is_padding_valid(self, cipher):
        """Decrypt without stripping and report only whether the padding is
        well formed. Garbage input is invalid, never an exception."""
        block_size = self._cipher.block_size
        if len(cipher) == 0 or len(cipher)%block_size != 0:
            return False
        plain = decrypt_CBC_raw(cipher, self._key, self._iv,
                                block_cipher=self._cipher)
        return is_PKCS7_valid(plain, block_size=block_size)

def random_mode_encrypt(plain, block_cipher=AES_BLOCK):
    """Encrypt under a fresh random key with 5-10 random bytes on either side,
    using ECB or CBC at random. Returns (cipher, mode) so callers can check a
    mode guess."""
    block_size = block_cipher.block_size
    key = random_bytes(count=block_size)
    before_bytes = random_bytes(count=randint(5, 10))
    after_bytes = random_bytes(count=randint(5, 10))
    plain = before_bytes+bytes(plain)+after_bytes
    mode = choice(['ECB', 'CBC'])
    log.debug('random oracle picked %s', mode)
    if mode == 'ECB':
        return encrypt_ECB(plain, key, block_cipher=block_cipher), mode
    iv = random_bytes(count=block_size)
    return encrypt_CBC(plain, key, iv, block_cipher=block_cipher), mode
