import logging

from .block import decrypt_CBC, decrypt_ECB, encrypt_CBC, encrypt_CTR, encrypt_ECB
from .cipher import BLOCK_SIZE
from .utils import random_bytes

"""Ciphertext tampering without the key: ECB cut-and-paste and CBC/CTR
bit-flipping against toy services that trust decrypted tokens"""

log = logging.getLogger(__name__)

def parse_kv(in_str):
    tokens = in_str.split('&')
    parsed = {}
    for token in tokens:
        key, value = token.split('=', 1)
        parsed[key] = value
    return parsed

def encode_kv(in_dict):
    encoded = []
    for key, value in in_dict.items():
        encoded.append(key+'='+value)
    return '&'.join(encoded)

def profile_for(email):
    """Encoded user profile. Metacharacters are eaten so the email cannot add
    fields of its own."""
    email = ''.join(email.split('='))
    email = ''.join(email.split('&'))
    profile = {'email': email, 'uid': '10', 'role': 'user'}
    return encode_kv(profile)

class ProfileManager(object):
    """Issues ECB-encrypted profile tokens and reads them back"""

    def __init__(self, key=None):
        self._key = random_bytes(count=BLOCK_SIZE) if key is None else key

    def encrypt_profile(self, email):
        plain = bytes(profile_for(email), 'utf-8')
        return encrypt_ECB(plain, self._key)

    def decrypt_profile(self, cipher):
        plain = decrypt_ECB(cipher, self._key)
        return parse_kv(plain.decode('utf-8'))

def cut_and_paste_admin(encrypt_func, block_size=BLOCK_SIZE):
    """Forge a token with role=admin from profile_for-style tokens, assuming
    the layout 'email=<in>&uid=10&role=user'. Craft an email so the second
    block is 'admin' with valid PKCS#7 padding and the third block ends in
    '&role=', then splice the admin block in at the end."""
    pad_len = block_size-len('admin')
    fake_email = 'fooey@bar.'+'admin'+chr(pad_len)*pad_len+'com'
    cipher = encrypt_func(fake_email)
    first = cipher[:block_size]
    admin = cipher[block_size:2*block_size]
    role = cipher[2*block_size:3*block_size]
    return first+role+admin

COMMENT_PREFIX = b'comment1=cooking%20MCs;userdata='
COMMENT_SUFFIX = b';comment2=%20like%20a%20pound%20of%20bacon'
ADMIN_TOKEN = b';admin=true;'

class CommentService(object):
    """Wraps quoted user data in a fixed comment string and encrypts it with
    CBC or CTR. is_admin decrypts a token and looks for ';admin=true;'."""

    def __init__(self, mode='CBC', key=None, iv=None, nonce=None):
        if mode not in ('CBC', 'CTR'):
            raise ValueError('mode must be CBC or CTR, not '+str(mode))
        self.mode = mode
        self._key = random_bytes(count=BLOCK_SIZE) if key is None else key
        self._iv = random_bytes(count=BLOCK_SIZE) if iv is None else iv
        self._nonce = random_bytes(count=BLOCK_SIZE//2) if nonce is None else nonce

    def encrypt(self, userdata):
        quoted = userdata.replace(b';', b'%3B').replace(b'=', b'%3D')
        plain = COMMENT_PREFIX+quoted+COMMENT_SUFFIX
        if self.mode == 'CTR':
            return encrypt_CTR(plain, self._key, nonce=self._nonce)
        return encrypt_CBC(plain, self._key, self._iv)

    def decrypt(self, cipher):
        if self.mode == 'CTR':
            return encrypt_CTR(cipher, self._key, nonce=self._nonce)
        return decrypt_CBC(cipher, self._key, self._iv)

    def is_admin(self, cipher):
        return ADMIN_TOKEN in self.decrypt(cipher)

def bitflip_admin(encrypt_func, prefix_len=len(COMMENT_PREFIX), mode='CBC',
                  block_size=BLOCK_SIZE):
    """Smuggle ';admin=true;' past the quoting of a CommentService-style
    encrypt_func by submitting '?admin?true?' and flipping bits.

    Assumes the prefix length is known. The input starts with enough bytes to
    block-align it, then a sacrificial block: in CBC mode flipping a bit there
    flips the same bit in the next plaintext block (and garbles this one); in
    CTR mode the placeholder bytes are flipped directly."""
    placeholder = b'?admin?true?'
    align = (-prefix_len)%block_size
    userdata = b'A'*(align+block_size)+placeholder
    cipher = bytearray(encrypt_func(userdata))

    offset = prefix_len+align
    if mode != 'CBC':
        offset += block_size
    for idx, (have, want) in enumerate(zip(placeholder, ADMIN_TOKEN)):
        cipher[offset+idx] ^= have^want
    log.debug('flipped %s ciphertext at offset %d', mode, offset)
    return bytes(cipher)
