import base64
from random import randint
from unittest import TestCase

import blockcrack.ecb_attack as ea
from blockcrack.block import encrypt_ECB
from blockcrack.errors import AttackError
from blockcrack.oracles import CBCPaddingOracle, ECBSuffixOracle, random_mode_encrypt
from blockcrack.utils import random_bytes

SECRET = b'admin-secret-42'
UNKNOWN_PLAIN = base64.b64decode(
    'Um9sbGluJyBpbiBteSA1LjAKV2l0aCBteSByYWctdG9wIGRvd24gc28gbXkgaGFpciBjYW4gYm'\
   +'xvdwpUaGUgZ2lybGllcyBvbiBzdGFuZGJ5IHdhdmluZyBqdXN0IHRvIHNheSBoaQpEaWQgeW91'\
   +'IHN0b3A/IE5vLCBJIGp1c3QgZHJvdmUgYnkK')

class Discovery(TestCase):

    def test_block_size(self):
        oracle = ECBSuffixOracle(SECRET)
        self.assertEqual(ea.get_block_size(oracle.encrypt), 16)
        oracle = ECBSuffixOracle(SECRET, prefix=random_bytes(count=randint(0, 40)))
        self.assertEqual(ea.get_block_size(oracle.encrypt), 16)

    def test_block_size_never_grows(self):
        self.assertRaises(AttackError, ea.get_block_size, lambda x: bytes(16), max_size=40)

    def test_detect_ECB(self):
        block = random_bytes()
        self.assertTrue(ea.detect_ECB(random_bytes(count=32)+block+block, 16))
        self.assertFalse(ea.detect_ECB(random_bytes(count=16)+random_bytes(count=16), 16))

    def test_ECB_oracle(self):
        oracle = ECBSuffixOracle(SECRET, prefix=random_bytes(count=7))
        self.assertTrue(ea.ECB_oracle(oracle.encrypt, 16))
        self.assertFalse(ea.ECB_oracle(CBCPaddingOracle().encrypt, 16))

    # ECB/CBC detection oracle
    def test_guess_mode(self):
        for _ in range(200):
            cipher, mode = random_mode_encrypt(bytes(64))
            self.assertEqual(ea.guess_mode(cipher, 16), mode)

    def test_prefix_alignment(self):
        for prefix_len in range(0, 40):
            oracle = ECBSuffixOracle(SECRET, prefix=random_bytes(count=prefix_len))
            start, extra = ea.find_prefix_alignment(oracle.encrypt, 16)
            self.assertEqual(start-extra, prefix_len)
            self.assertEqual(start%16, 0)

    def test_suffix_len(self):
        for suffix_len in [0, 1, 15, 16, 17, 40]:
            oracle = ECBSuffixOracle(random_bytes(count=suffix_len), prefix=bytes(5))
            self.assertEqual(ea.find_suffix_len(oracle.encrypt, 16, prefix_len=5), suffix_len)

class RecoverSuffix(TestCase):

    def test_simple(self):
        oracle = ECBSuffixOracle(SECRET)
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), SECRET)

    # byte-at-a-time ECB decryption (Simple)
    def test_12(self):
        oracle = ECBSuffixOracle(UNKNOWN_PLAIN)
        block_size = ea.get_block_size(oracle.encrypt)
        self.assertEqual(block_size, 16)
        self.assertTrue(ea.ECB_oracle(oracle.encrypt, block_size))
        secret = ea.recover_ECB_suffix(oracle.encrypt, block_size=block_size)
        self.assertEqual(secret, UNKNOWN_PLAIN)

    # byte-at-a-time ECB decryption (Harder)
    def test_14(self):
        oracle = ECBSuffixOracle(UNKNOWN_PLAIN, prefix=random_bytes(count=randint(0, 64)))
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), UNKNOWN_PLAIN)

    def test_every_prefix_length(self):
        for prefix_len in range(0, 41):
            oracle = ECBSuffixOracle(SECRET, prefix=random_bytes(count=prefix_len))
            self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), SECRET)

    def test_empty_secret(self):
        self.assertEqual(ea.recover_ECB_suffix(ECBSuffixOracle(b'').encrypt), b'')
        oracle = ECBSuffixOracle(b'', prefix=random_bytes(count=21))
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), b'')

    def test_aligned_secret(self):
        secret = random_bytes(count=32)
        oracle = ECBSuffixOracle(secret, prefix=random_bytes(count=16))
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), secret)

    def test_filler_lookalikes(self):
        """Prefix tail made of one filler byte, secret starting with another"""
        prefix = random_bytes(count=16)+b'A'*7
        secret = b'\x00\x00\x00'+SECRET
        oracle = ECBSuffixOracle(secret, prefix=prefix)
        self.assertEqual(ea.find_prefix_alignment(oracle.encrypt, 16), (32, 9))
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt), secret)

    def test_threaded(self):
        oracle = ECBSuffixOracle(SECRET, prefix=random_bytes(count=11))
        self.assertEqual(ea.recover_ECB_suffix(oracle.encrypt, workers=8), SECRET)

    def test_not_ECB(self):
        self.assertRaises(AttackError, ea.recover_ECB_suffix, CBCPaddingOracle().encrypt)

    def test_inconsistent_oracle(self):
        # a fresh key per query keeps every single ciphertext ECB-shaped but
        # no dictionary block can match a later query
        encrypt = lambda x: encrypt_ECB(b'pre'+x+b'secret-data', random_bytes())
        self.assertRaises(AttackError, ea.recover_ECB_suffix, encrypt, block_size=16)

    def test_no_alignment(self):
        self.assertRaises(AttackError, ea.find_prefix_alignment, CBCPaddingOracle().encrypt, 16)
        self.assertRaises(AttackError, ea.find_suffix_len, lambda x: bytes(32), 16)
