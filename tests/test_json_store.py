import tempfile
import unittest
from datetime import date
from pathlib import Path

from inventory_ledger.core.errors import StorageIOError, StorageParseError
from inventory_ledger.storage import JsonStore, find_index, generate_reference_number, next_id


class JsonStoreTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.store = JsonStore(self.data_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_collection_reads_empty(self):
        self.assertEqual(self.store.read_collection("stock"), [])

    def test_missing_collection_raises_when_strict(self):
        strict = JsonStore(self.data_dir, create_missing=False)
        with self.assertRaises(StorageIOError):
            strict.read_collection("stock")

    def test_blank_file_reads_empty(self):
        (self.data_dir / "stock.json").write_text("  \n", encoding="utf-8")
        self.assertEqual(self.store.read_collection("stock"), [])

    def test_invalid_json_raises_parse_error(self):
        (self.data_dir / "stock.json").write_text("[{", encoding="utf-8")
        with self.assertRaises(StorageParseError) as ctx:
            self.store.read_collection("stock")
        self.assertEqual(ctx.exception.code, "STORAGE_PARSE_ERROR")

    def test_non_array_raises_parse_error(self):
        (self.data_dir / "stock.json").write_text('{"id": 1}', encoding="utf-8")
        with self.assertRaises(StorageParseError):
            self.store.read_collection("stock")

    def test_write_replaces_file_and_leaves_no_temp_files(self):
        self.store.write_collection("stock", [{"id": 1, "quantity": 5}])
        self.store.write_collection("stock", [{"id": 1, "quantity": 7}])

        self.assertEqual(self.store.read_collection("stock"), [{"id": 1, "quantity": 7}])
        leftovers = [p.name for p in self.data_dir.iterdir() if p.name.endswith(".tmp")]
        self.assertEqual(leftovers, [])
        self.assertIn('\n  {', (self.data_dir / "stock.json").read_text(encoding="utf-8"))


class RecordHelpersTest(unittest.TestCase):
    def test_next_id(self):
        self.assertEqual(next_id([]), 1)
        self.assertEqual(next_id([{"id": 3}, {"id": 9}, {"id": 4}]), 10)

    def test_find_index(self):
        rows = [{"productId": 1, "warehouseId": 1}, {"productId": 1, "warehouseId": 2}]
        self.assertEqual(find_index(rows, productId=1, warehouseId=2), 1)
        self.assertEqual(find_index(rows, productId=2, warehouseId=2), -1)

    def test_reference_numbers_follow_todays_sequence(self):
        today = date(2024, 3, 5)
        existing = [
            {"referenceNumber": "TRF-20240305-0001"},
            {"referenceNumber": "TRF-20240305-0002"},
            {"referenceNumber": "TRF-20240304-0007"},
        ]
        self.assertEqual(
            generate_reference_number("TRF", existing, today=today),
            "TRF-20240305-0003",
        )
        self.assertEqual(generate_reference_number("TRF", [], today=today), "TRF-20240305-0001")

    def test_reference_numbers_ignore_other_prefixes(self):
        today = date(2024, 3, 5)
        existing = [{"referenceNumber": "PO-20240305-0004"}, {"referenceNumber": None}]
        self.assertEqual(
            generate_reference_number("ADJ", existing, today=today),
            "ADJ-20240305-0001",
        )


if __name__ == "__main__":
    unittest.main()
