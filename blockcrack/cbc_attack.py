import logging

from .cipher import BLOCK_SIZE
from .errors import AttackError
from .padding import strip_PKCS7
from .utils import get_block, pool_map, XOR_bytes

"""CBC padding oracle attack: recover plaintext given only a function that
reports whether a ciphertext decrypts to valid PKCS#7 padding"""

log = logging.getLogger(__name__)

def _scan_byte(padding_oracle, forged, block, pos, pmap):
    """Oracle answers for forged+block with forged[pos] set to 0..255"""
    def try_value(value):
        probe = bytearray(forged)
        probe[pos] = value
        return padding_oracle(bytes(probe)+block)
    return pmap(try_value, range(256))

def _accepted_values(padding_oracle, forged, block, pos, pmap):
    results = _scan_byte(padding_oracle, forged, block, pos, pmap)
    return [x for x, ok in zip(range(256), results) if ok]

def _padding_covers(padding_oracle, forged, block, pos, pmap):
    """Whether the padding accepted for forged+block extends over byte pos:
    if it does, some value of that byte must break it."""
    return not all(_scan_byte(padding_oracle, forged, block, pos, pmap))

def recover_intermediate(block, padding_oracle, block_size=BLOCK_SIZE, pmap=map):
    """Recover the raw block decryption D(key, block), before the CBC XOR,
    by forging the preceding ciphertext block.

    The first accepted value for the last byte may produce padding longer
    than one byte (e.g. \\x02\\x02 when the byte before already decrypts to
    2), so the length of the accepted padding is measured before anything is
    derived from it."""
    block = bytes(block)
    forged = bytearray(block_size)

    accepted = _accepted_values(padding_oracle, forged, block, block_size-1, pmap)
    if not accepted:
        raise AttackError('no value of the last byte gives valid padding')
    forged[-1] = accepted[0]
    pad_len = 1
    while pad_len < block_size and _padding_covers(
            padding_oracle, forged, block, block_size-pad_len-1, pmap):
        pad_len += 1
    if pad_len > 1:
        log.debug('first accepted probe has %d bytes of padding', pad_len)

    intermediate = bytearray(block_size)
    for pos in range(block_size-pad_len, block_size):
        intermediate[pos] = forged[pos]^pad_len

    for pad_byte in range(pad_len+1, block_size+1):
        pos = block_size-pad_byte
        for jdx in range(pos+1, block_size):
            forged[jdx] = intermediate[jdx]^pad_byte
        accepted = _accepted_values(padding_oracle, forged, block, pos, pmap)
        if len(accepted) != 1:
            # only one value can end the block in pad_byte copies of pad_byte
            raise AttackError('expected one valid value for byte {}, oracle '
                              'accepted {}'.format(pos, len(accepted)))
        intermediate[pos] = accepted[0]^pad_byte
    return bytes(intermediate)

def recover_CBC_plaintext(cipher, padding_oracle, iv=None, block_size=BLOCK_SIZE,
                          workers=1):
    """Decrypt a cipher text, encrypted with CBC, given an oracle function that
    will take a ciphertext as input and return True or False depending on whether
    the decrypted plaintext has valid PKCS#7 padding.

    Probes are always two blocks long, so the oracle may use any IV of its
    own. The real IV is only needed to decrypt the first block; if iv is None
    it is taken to be prepended to cipher. With workers > 1 the 256 candidate
    probes for each byte are sent from a thread pool.

    Returns the plaintext with padding stripped. Raises AttackError if the
    oracle answers inconsistently."""
    cipher = bytes(cipher)
    if iv is None:
        iv, cipher = cipher[:block_size], cipher[block_size:]
    if len(iv) != block_size:
        raise ValueError('IV must be exactly one block ({} bytes)'.format(block_size))
    if len(cipher) == 0 or len(cipher)%block_size != 0:
        raise ValueError('ciphertext must be a non-empty multiple of the block size')

    num_blocks = len(cipher)//block_size
    prev = bytes(iv)
    plain = bytearray([])
    with pool_map(workers) as pmap:
        for idx in range(num_blocks):
            cipher_block = get_block(cipher, idx, block_size)
            intermediate = recover_intermediate(cipher_block, padding_oracle,
                                                block_size=block_size, pmap=pmap)
            plain += XOR_bytes(intermediate, prev)
            log.info('recovered block %d of %d', idx+1, num_blocks)
            prev = cipher_block

    unpadded = strip_PKCS7(plain, block_size=block_size)
    if unpadded is None:
        raise AttackError('recovered plaintext does not end in valid padding: '
                          '{!r}'.format(bytes(plain)))
    return unpadded
