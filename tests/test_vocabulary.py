"""Unit tests for vocabulary loading."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from qualia.nlp.vocabulary import Vocabulary, VocabularyError, load_vocabulary


class VocabularyTests(unittest.TestCase):
    def _write(self, content: str | bytes) -> Path:
        temp_dir = tempfile.TemporaryDirectory()
        self.addCleanup(temp_dir.cleanup)
        path = Path(temp_dir.name) / "vocab.txt"
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def test_ids_follow_non_blank_line_order(self) -> None:
        path = self._write("[PAD]\n[UNK]\n\n[CLS]\n[SEP]\n\nthe\n")
        vocab = load_vocabulary(path)
        self.assertEqual(vocab["[CLS]"], 2)
        self.assertEqual(vocab["[SEP]"], 3)
        self.assertEqual(vocab["the"], 4)
        self.assertEqual(len(vocab), 5)

    def test_special_ids_resolved_from_file(self) -> None:
        vocab = Vocabulary(["hello", "[UNK]", "[PAD]", "[CLS]", "[SEP]"])
        self.assertEqual(vocab.unk_id, 1)
        self.assertEqual(vocab.pad_id, 2)
        self.assertEqual(vocab.cls_id, 3)
        self.assertEqual(vocab.sep_id, 4)

    def test_missing_specials_fall_back_to_defaults(self) -> None:
        vocab = Vocabulary(["[CLS]", "[SEP]", "word"])
        self.assertEqual(vocab.unk_id, 100)
        self.assertEqual(vocab.pad_id, 0)
        self.assertEqual(vocab.id_for("missing"), 100)

    def test_windows_line_endings(self) -> None:
        path = self._write("[PAD]\r\n[UNK]\r\nfoo\r\n")
        vocab = load_vocabulary(path)
        self.assertEqual(vocab["foo"], 2)

    def test_missing_file_is_fatal(self) -> None:
        with self.assertRaises(OSError):
            load_vocabulary("/nonexistent/vocab.txt")

    def test_invalid_utf8_is_fatal(self) -> None:
        path = self._write(b"[PAD]\n\xff\xfe\xfa\n")
        with self.assertRaises(VocabularyError):
            load_vocabulary(path)

    def test_empty_file_is_fatal(self) -> None:
        path = self._write("\n\n")
        with self.assertRaises(VocabularyError):
            load_vocabulary(path)


if __name__ == "__main__":
    unittest.main()
