from functools import lru_cache

from Crypto.Cipher import AES

"""Single-block cipher primitives. The mode engine only ever talks to the
BlockCipher interface, so any fixed-width permutation can be plugged in."""

BLOCK_SIZE = AES.block_size

class BlockCipher(object):
    """Keyed permutation on blocks of block_size bytes. Keys are also
    block_size bytes. Subclasses provide _encrypt and _decrypt."""

    block_size = BLOCK_SIZE

    def encrypt_block(self, key, block):
        self._check(key, block)
        return self._encrypt(bytes(key), bytes(block))

    def decrypt_block(self, key, block):
        self._check(key, block)
        return self._decrypt(bytes(key), bytes(block))

    def _check(self, key, block):
        if len(key) != self.block_size:
            raise ValueError('key must be {} bytes, got {}'.format(
                self.block_size, len(key)))
        if len(block) != self.block_size:
            raise ValueError('block must be {} bytes, got {}'.format(
                self.block_size, len(block)))

    def _encrypt(self, key, block):
        raise NotImplementedError

    def _decrypt(self, key, block):
        raise NotImplementedError

@lru_cache(maxsize=64)
def _AES_ECB(key):
    return AES.new(key, AES.MODE_ECB)

class AES_block(BlockCipher):
    """AES-128 applied to exactly one block. Keyed AES objects are cached, as
    the attacks make thousands of queries under one key."""

    def _encrypt(self, key, block):
        return _AES_ECB(key).encrypt(block)

    def _decrypt(self, key, block):
        return _AES_ECB(key).decrypt(block)

AES_BLOCK = AES_block()
