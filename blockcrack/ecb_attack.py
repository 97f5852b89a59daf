import logging

from .errors import AttackError
from .utils import get_block, pool_map, random_bytes, single_bytes

"""Chosen-plaintext attacks on ECB: block size and mode discovery, and
byte-at-a-time recovery of a secret appended to attacker input"""

log = logging.getLogger(__name__)

MAX_BLOCK_SIZE = 256

# a prefix ending in, or a suffix starting with, a filler byte can fake an
# alignment; with three fillers at least one is always clean
ALIGN_FILLERS = (b'\x00', b'A', b'\xff')

def detect_ECB(cipher, block_size):
    """Detect whether an encrypted ciphertext used ECB, by looking for
    repeated code blocks."""
    num_blocks = len(cipher)//block_size
    blocks = [get_block(cipher, x, block_size) for x in range(num_blocks)]
    return len(blocks) != len(set(blocks))

def guess_mode(cipher, block_size):
    return 'ECB' if detect_ECB(cipher, block_size) else 'CBC'

def ECB_oracle(encrypt_func, block_size, num_blocks=4):
    """Return whether or not a specified black-box block-cipher encryption
    function is using ECB mode. Four copies of a block guarantee at least
    three aligned copies whatever the prefix length."""
    test = random_bytes(count=block_size)*num_blocks
    cipher = encrypt_func(test)
    return detect_ECB(cipher, block_size)

def get_block_size(encrypt_func, max_size=MAX_BLOCK_SIZE):
    """Find block size used by a black-box, block-cipher encryption function:
    the first jump in ciphertext length as the input grows."""
    base_len = len(encrypt_func(bytes([])))
    for in_size in range(1, max_size+1):
        cipher_len = len(encrypt_func(bytes([0]*in_size)))
        if cipher_len != base_len:
            return cipher_len-base_len
    raise AttackError('ciphertext length never changed for inputs up to '
                      '{} bytes'.format(max_size))

def _find_repeat(encrypt_func, block_size, filler, other):
    """Grow a filler of at least two blocks until two consecutive ciphertext
    blocks repeat. A repeat only counts if the block changes when the filler
    byte does, so repeats inside the prefix or suffix are ignored."""
    for extra in range(block_size):
        in_len = 2*block_size+extra
        cipher = encrypt_func(filler*in_len)
        control = encrypt_func(other*in_len)
        for idx in range(len(cipher)//block_size-1):
            block = get_block(cipher, idx, block_size)
            if (block == get_block(cipher, idx+1, block_size)
                    and block != get_block(control, idx, block_size)):
                return idx*block_size, extra
    return None

def find_prefix_alignment(encrypt_func, block_size):
    """For an ECB encryption function that prepends an unknown, fixed-length
    prefix to the input, return (start, extra): the offset of the first block
    fully under our control, and how many input bytes it takes to fill up the
    prefix's last block. The prefix length is start-extra."""
    found = []
    for num, filler in enumerate(ALIGN_FILLERS):
        other = ALIGN_FILLERS[(num+1)%len(ALIGN_FILLERS)]
        result = _find_repeat(encrypt_func, block_size, filler, other)
        if result is not None:
            found.append(result)
    log.debug('prefix alignment candidates %s', found)
    for start, extra in sorted(set(found), reverse=True):
        if _check_alignment(encrypt_func, block_size, start, extra):
            return start, extra
    raise AttackError('no consistent prefix alignment found; is this ECB?')

def _check_alignment(encrypt_func, block_size, start, extra):
    """Two copies of a random block placed after extra bytes must encrypt to
    two identical blocks at start."""
    test = random_bytes(count=block_size)
    cipher = encrypt_func(bytes([0]*extra)+test*2)
    idx = start//block_size
    return get_block(cipher, idx, block_size) == get_block(cipher, idx+1, block_size)

def find_suffix_len(encrypt_func, block_size, prefix_len=0):
    """Length of the unknown suffix: the ciphertext grows by a block at the
    first input length that completes the last plaintext block."""
    base_len = len(encrypt_func(bytes([])))
    for in_size in range(1, block_size+1):
        if len(encrypt_func(bytes([0]*in_size))) != base_len:
            return base_len-prefix_len-in_size
    raise AttackError('ciphertext did not grow within one block of input')

def recover_ECB_suffix(encrypt_func, block_size=None, workers=1):
    """Determine a secret plaintext used by a black-box, block-cipher
    encryption function operating in ECB mode. The function must append the
    secret to arbitrary, user-supplied input (optionally after a fixed unknown
    prefix) and use the same key for each query.

    With workers > 1 the 256 dictionary queries for each byte are spread over
    a thread pool. Raises AttackError if the oracle is not ECB or a byte
    cannot be matched."""
    if block_size is None:
        block_size = get_block_size(encrypt_func)
    log.info('block size is %d', block_size)
    if not ECB_oracle(encrypt_func, block_size):
        raise AttackError('encryption function does not appear to use ECB')

    start, extra = find_prefix_alignment(encrypt_func, block_size)
    prefix_len = start-extra
    suffix_len = find_suffix_len(encrypt_func, block_size, prefix_len=prefix_len)
    log.info('prefix is %d bytes, secret is %d bytes', prefix_len, suffix_len)
    pre_idx = start//block_size

    def determine_padding(known):
        """Given current knowledge, determine input so that the next unknown
        byte lands on the last byte of a block, the index of that block, and
        the input whose next block holds the N-1 bytes preceding it."""
        pad_size = extra+block_size-1-len(known)%block_size
        in_bytes = bytes([0]*pad_size)
        idx = pre_idx+len(known)//block_size
        window = (bytes([0]*(block_size-1))+bytes(known))[-(block_size-1):]
        return in_bytes, idx, bytes([0]*extra)+window

    secret = bytearray([])
    with pool_map(workers) as pmap:
        while len(secret) < suffix_len:
            in_bytes, idx, last_frag = determine_padding(secret)
            cipher_frags = pmap(lambda x: get_block(encrypt_func(last_frag+x), pre_idx, block_size),
                                single_bytes)
            plain_dict = {x: y[0] for x, y in zip(cipher_frags, single_bytes)}
            cipher_frag = get_block(encrypt_func(in_bytes), idx, block_size)
            if cipher_frag not in plain_dict:
                raise AttackError('no candidate matched secret byte {} (recovered '
                                  'so far: {!r})'.format(len(secret), bytes(secret)))
            secret.append(plain_dict[cipher_frag])
            log.debug('secret byte %d: %r', len(secret)-1, bytes(secret[-1:]))
    log.info('recovered %d secret bytes', len(secret))
    return bytes(secret)
