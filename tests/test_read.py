import os
import tempfile
import unittest as ut

from bombe.errors import InvalidSymbolError, ResourceError
from bombe.read import read_ciphertext


class ReadCiphertextTest(ut.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write(self, content):
        path = os.path.join(self.tmp.name, "cipher.txt")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_strips_surrounding_whitespace(self):
        self.assertEqual(read_ciphertext(self.write("QBTQCKATDAWN\n")), "QBTQCKATDAWN")

    def test_rejects_other_symbols(self):
        for content in ("QBT QCK", "QBTq", "QBT1", "QBT\nQCK"):
            with self.subTest(content=content):
                with self.assertRaises(InvalidSymbolError):
                    read_ciphertext(self.write(content))

    def test_missing_file(self):
        with self.assertRaises(ResourceError):
            read_ciphertext(os.path.join(self.tmp.name, "missing.txt"))


if __name__ == '__main__':
    ut.main()
