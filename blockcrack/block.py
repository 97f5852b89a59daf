from .cipher import AES_BLOCK
from .padding import pad_PKCS7, unpad_PKCS7
from .utils import get_block, XOR_bytes

"""Block cipher modes of operation (ECB, CBC and CTR) on top of a single-block
primitive. Every function takes an optional block_cipher, defaulting to AES."""

def _num_blocks(data, block_size, what):
    if len(data)%block_size != 0:
        raise ValueError('{} length {} is not a multiple of the block size {}'.format(
            what, len(data), block_size))
    return len(data)//block_size

def _check_iv(iv, block_size):
    if iv is None or len(iv) != block_size:
        raise ValueError('IV must be exactly one block ({} bytes)'.format(block_size))
    return bytes(iv)

def encrypt_ECB(plain, key, block_cipher=AES_BLOCK):
    block_size = block_cipher.block_size
    plain = pad_PKCS7(plain, block_size=block_size)
    num_blocks = len(plain)//block_size
    blocks = [get_block(plain, idx, block_size) for idx in range(num_blocks)]
    return b''.join([block_cipher.encrypt_block(key, x) for x in blocks])

def decrypt_ECB(cipher, key, block_cipher=AES_BLOCK):
    """Decrypt and strip padding. Raises PaddingError on invalid padding."""
    block_size = block_cipher.block_size
    num_blocks = _num_blocks(cipher, block_size, 'ECB ciphertext')
    blocks = [get_block(cipher, idx, block_size) for idx in range(num_blocks)]
    plain = b''.join([block_cipher.decrypt_block(key, x) for x in blocks])
    return unpad_PKCS7(plain, block_size=block_size)

def encrypt_CBC(plain, key, iv, block_cipher=AES_BLOCK):
    block_size = block_cipher.block_size
    prev = _check_iv(iv, block_size)
    plain = pad_PKCS7(plain, block_size=block_size)
    num_blocks = len(plain)//block_size

    cipher = bytearray([])
    for idx in range(num_blocks):
        plain_block = XOR_bytes(get_block(plain, idx, block_size), prev)
        cipher_block = block_cipher.encrypt_block(key, plain_block)
        cipher += cipher_block
        prev = cipher_block
    return bytes(cipher)

def decrypt_CBC_raw(cipher, key, iv, block_cipher=AES_BLOCK):
    """CBC decryption with the padding left in place and unchecked"""
    block_size = block_cipher.block_size
    prev = _check_iv(iv, block_size)
    num_blocks = _num_blocks(cipher, block_size, 'CBC ciphertext')

    plain = bytearray([])
    for idx in range(num_blocks):
        cipher_block = get_block(cipher, idx, block_size)
        plain += XOR_bytes(block_cipher.decrypt_block(key, cipher_block), prev)
        prev = cipher_block
    return bytes(plain)

def decrypt_CBC(cipher, key, iv, block_cipher=AES_BLOCK):
    """Decrypt and strip padding. Raises PaddingError on invalid padding."""
    plain = decrypt_CBC_raw(cipher, key, iv, block_cipher=block_cipher)
    return unpad_PKCS7(plain, block_size=block_cipher.block_size)

def encrypt_CTR(data, key, nonce=0, block_cipher=AES_BLOCK):
    return CTR_stream(key, nonce=nonce, block_cipher=block_cipher).process(data)

# the keystream XOR is its own inverse
decrypt_CTR = encrypt_CTR

class CTR_stream(object):
    """Encrypt/decrypt in CTR (stream) mode. Keystream block i is the
    encryption of nonce || i, both halves little-endian. Kept as a class so the
    counter can be moved for random-access edits."""

    def __init__(self, key, nonce=0, block_cipher=AES_BLOCK):
        self._half = block_cipher.block_size//2
        if isinstance(nonce, int):
            if nonce < 0 or nonce >= 2**(8*self._half):
                raise ValueError('integer nonce must fit in {} bytes'.format(self._half))
            self._nonce = nonce.to_bytes(self._half, 'little')
        else:
            if len(nonce) != self._half:
                raise ValueError('nonce must be {} bytes'.format(self._half))
            self._nonce = bytes(nonce)
        if len(key) != block_cipher.block_size:
            raise ValueError('key must be {} bytes'.format(block_cipher.block_size))
        self._key = bytes(key)
        self._cipher = block_cipher
        self._count = 0

    def process(self, plain):
        step = self._cipher.block_size
        offsets = range(0, len(plain), step)
        out_blocks = [self._process_block(plain[x:x+step]) for x in offsets]
        return b''.join(out_blocks)

    def reset(self):
        self._count = 0

    def edit(self, cipher, offset_block, new_plain):
        """Return a copy of cipher with new_plain encrypted in place, starting
        at block offset_block. The stream position is left unchanged."""
        old_count = self._count
        offset = offset_block*self._cipher.block_size
        new_cipher = bytearray(cipher)
        try:
            self._count = offset_block
            new_cipher_block = self.process(new_plain)
            new_cipher[offset:offset+len(new_cipher_block)] = new_cipher_block
        finally:
            self._count = old_count
        return bytes(new_cipher)

    def _process_block(self, plain):
        in_bytes = self._nonce+self._count.to_bytes(self._half, 'little')
        keystream = self._cipher.encrypt_block(self._key, in_bytes)
        keystream = keystream[:len(plain)]
        self._count += 1
        return XOR_bytes(plain, keystream, repeat=False)
