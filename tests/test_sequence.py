import unittest

from ovlrefine.alignment.sequence import complement, reverse_complement, validate_bases
from ovlrefine.errors import InvalidBaseError


class TestComplement(unittest.TestCase):

    def test_complement_pairs(self):
        self.assertEqual(complement(ord("A")), ord("T"))
        self.assertEqual(complement(ord("T")), ord("A"))
        self.assertEqual(complement(ord("C")), ord("G"))
        self.assertEqual(complement(ord("G")), ord("C"))

    def test_complement_rejects_other_bytes(self):
        for base in b"NacgtU-":
            with self.assertRaises(InvalidBaseError):
                complement(base)


class TestReverseComplement(unittest.TestCase):

    def test_reverse_complement(self):
        self.assertEqual(reverse_complement(b"AACGTT"), b"AACGTT")
        self.assertEqual(reverse_complement(b"ATGC"), b"GCAT")
        self.assertEqual(reverse_complement(b"AAAC"), b"GTTT")

    def test_empty(self):
        self.assertEqual(reverse_complement(b""), b"")

    def test_involution(self):
        for seq in (b"A", b"ACGTTGCA", b"TTTTGTTTTTTTTTTCTTTTTTTTTTTTTTTTTTTGCT", b"CACCAGGCCA"):
            self.assertEqual(reverse_complement(reverse_complement(seq)), seq)

    def test_accepts_memoryview(self):
        self.assertEqual(reverse_complement(memoryview(b"ACCT")), b"AGGT")

    def test_invalid_base(self):
        with self.assertRaises(InvalidBaseError) as cm:
            reverse_complement(b"ACGNT")
        self.assertEqual(cm.exception.base, ord("N"))

    def test_lowercase_is_invalid(self):
        with self.assertRaises(InvalidBaseError):
            validate_bases(b"acgt")
