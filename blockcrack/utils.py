from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from itertools import cycle
from random import randint

from .cipher import BLOCK_SIZE

"""Byte-level helpers shared by the mode engine and the attacks"""

single_bytes = [bytes([x]) for x in range(256)]

def get_block(in_bytes, idx, block_size=BLOCK_SIZE):
    return bytes(in_bytes[idx*block_size:(idx+1)*block_size])

def hex_to_bytes(hex_string):
    return bytes.fromhex(hex_string)

def bytes_to_hex(in_bytes):
    return bytes.hex(bytes(in_bytes))

def XOR_bytes(bytes_1, bytes_2, repeat=True):
    """XOR two byte-like objects. If repeat==True, the shorter of the two
    sequences will be cycled until the longer sequence is exhausted, otherwise
    the output is truncated to the shorter one."""
    if repeat == False:
        return bytes([x^y for x, y in zip(bytes_1, bytes_2)])
    if len(bytes_1) >= len(bytes_2):
        return bytes([x^y for x, y in zip(bytes_1, cycle(bytes_2))])
    else:
        return bytes([x^y for x, y in zip(cycle(bytes_1), bytes_2)])

def random_bytes(count=BLOCK_SIZE):
    return bytes([randint(0, 255) for _ in range(count)])

@contextmanager
def pool_map(workers=1):
    """Yield a map function: the builtin map for a single worker, otherwise a
    thread pool's map. Both preserve input order."""
    if workers is None or workers <= 1:
        yield map
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            yield executor.map
