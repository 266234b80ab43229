"""
Unit tests for catalog and grade-file loading.

- The packaged catalog contains both semesters with their UEs
- Grade files round-trip through save/load
- Broken files raise CatalogError
"""

import tempfile
import unittest
from pathlib import Path

from moyenne.catalog import CatalogError, load_catalog, load_semester_file, save_semester_file
from moyenne.model import ModuleType


class TestCatalog(unittest.TestCase):
    def test_default_catalog(self) -> None:
        semesters = load_catalog()
        self.assertEqual([s.id for s in semesters], ["sem3", "sem4"])

        sem3 = semesters[0]
        self.assertEqual([ue.coefficient for ue in sem3.ues], [9, 6, 5, 6])
        geo = sem3.find_module("mod-geo-eco")
        assert geo is not None
        self.assertIs(geo.type, ModuleType.FULL_EXAM)
        self.assertTrue(all(m.exam is None for m in sem3.modules()))

    def test_grade_file_roundtrip(self) -> None:
        sem3 = load_catalog()[0].with_grades({"mod-analyse-3": (12.5, 9.0), "mod-geo-eco": (None, 0.0)})
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "s3.json"
            save_semester_file(sem3, p)
            self.assertEqual(load_semester_file(p), sem3)

    def test_missing_and_broken_files(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            with self.assertRaises(CatalogError):
                load_catalog(Path(d) / "missing.json")

            broken = Path(d) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            with self.assertRaises(CatalogError):
                load_catalog(broken)

            empty = Path(d) / "empty.json"
            empty.write_text('{"semesters": []}', encoding="utf-8")
            with self.assertRaises(CatalogError):
                load_catalog(empty)

            bad_type = Path(d) / "bad.json"
            bad_type.write_text(
                '{"id": "s", "ues": [{"id": "u", "coefficient": 1, '
                '"modules": [{"id": "m", "coefficient": 1, "type": "50/50"}]}]}',
                encoding="utf-8",
            )
            with self.assertRaises(CatalogError):
                load_semester_file(bad_type)


if __name__ == "__main__":
    unittest.main()
