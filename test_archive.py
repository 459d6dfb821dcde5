from __future__ import annotations

import io
import unittest
import zipfile
from typing import Dict, Tuple

from sbunpack.archive import ArchiveView
from sbunpack.constants import FIXED_ZIP_DATE_TIME
from sbunpack.pathutil import containing_folder, matches_name
from sbunpack.project import classify_asset_name, count_assets, guess_type_from_assets
from sbunpack.rebuild import rebuild_zip
from sbunpack.zipproject import extract_zip_project, strip_non_assets


SB3_ASSET = "a1b2c3d4e5f6a1b2c3d4e5f6a1b2c3d4.png"
SB3_ASSET_2 = "0123456789abcdef0123456789abcdef.wav"


def _zip(entries: Dict[str, bytes], date_time: Tuple[int, ...] = (2001, 2, 3, 4, 5, 6)) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(zipfile.ZipInfo(name, date_time=date_time), data)
    return buf.getvalue()


def _names(data: bytes):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.namelist()


class PathTests(unittest.TestCase):
    def test_containing_folder(self):
        self.assertEqual(containing_folder("project.json"), "")
        self.assertEqual(containing_folder("a/b/project.json"), "a/b")

    def test_matches_name(self):
        self.assertTrue(matches_name("project.json", "project.json"))
        self.assertTrue(matches_name("x/project.json", "project.json"))
        self.assertFalse(matches_name("xproject.json", "project.json"))


class ArchiveViewTests(unittest.TestCase):
    def test_open_non_zip(self):
        self.assertIsNone(ArchiveView.open_or_none(b"<html></html>"))
        self.assertIsNone(ArchiveView.open_or_none(b""))

    def test_open_and_read(self):
        view = ArchiveView.open_or_none(_zip({"a.txt": b"A", "d/b.txt": b"B"}))
        self.assertEqual(view.names(), ["a.txt", "d/b.txt"])
        self.assertEqual(view.read("d/b.txt"), b"B")
        self.assertIn("a.txt", view)
        self.assertEqual(len(view), 2)
        with self.assertRaises(KeyError):
            view.read("missing")

    def test_directory_members_dropped(self):
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as zf:
            zf.writestr("d/", b"")
            zf.writestr("d/project.json", b"{}")
        view = ArchiveView.open_or_none(buf.getvalue())
        self.assertEqual(view.names(), ["d/project.json"])

    def test_close_releases_source(self):
        view = ArchiveView.open_or_none(_zip({"a.txt": b"A", "b.txt": b"B"}))
        with view:
            self.assertEqual(view.read("a.txt"), b"A")
        # Already-read members stay available
        self.assertEqual(view.read("a.txt"), b"A")
        with self.assertRaises(ValueError):
            view.read("b.txt")
        view.close()

    def test_find_prefers_exact_then_first_suffix(self):
        view = ArchiveView.open_or_none(_zip({"x/project.json": b"1", "y/project.json": b"2", "project.json": b"3"}))
        self.assertEqual(view.find("project.json"), "project.json")
        view.remove("project.json")
        self.assertEqual(view.find("project.json"), "x/project.json")
        self.assertIsNone(view.find("project.zip"))

    def test_folder_is_relative(self):
        view = ArchiveView.open_or_none(_zip({"g/project.json": b"{}", "g/1.png": b"p", "other.txt": b"o"}))
        sub = view.folder("g")
        self.assertEqual(sub.names(), ["project.json", "1.png"])
        self.assertEqual(sub.read("1.png"), b"p")
        # the parent is untouched
        self.assertEqual(len(view), 3)

    def test_add_remove(self):
        view = ArchiveView()
        view.add("a", b"1")
        view.add("b", b"2")
        view.remove("a")
        view.remove("never-there")
        self.assertEqual(view.names(), ["b"])


class RebuildTests(unittest.TestCase):
    def test_fixed_timestamp_and_deflate(self):
        view = ArchiveView.open_or_none(_zip({"project.json": b"{}" * 100}))
        data = rebuild_zip(view)
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            info = zf.getinfo("project.json")
            # zip stores seconds at 2s resolution
            self.assertEqual(info.date_time[:5], FIXED_ZIP_DATE_TIME[:5])
            self.assertEqual(info.compress_type, zipfile.ZIP_DEFLATED)
            self.assertEqual(zf.read("project.json"), b"{}" * 100)

    def test_identical_content_identical_bytes(self):
        entries = {"project.json": b'{"targets":[]}', SB3_ASSET: b"\x89PNG"}
        a = ArchiveView.open_or_none(_zip(entries, (1999, 1, 1, 0, 0, 0)))
        b = ArchiveView.open_or_none(_zip(entries, (2020, 12, 31, 23, 59, 58)))
        c = ArchiveView()
        for name, data in entries.items():
            c.add(name, data)
        self.assertEqual(rebuild_zip(a), rebuild_zip(b))
        self.assertEqual(rebuild_zip(a), c.to_bytes())
        self.assertEqual(c.to_bytes(), c.to_bytes())


class AssetClassificationTests(unittest.TestCase):
    def test_names(self):
        self.assertEqual(classify_asset_name(SB3_ASSET), "sb3")
        self.assertEqual(classify_asset_name("A1B2C3D4E5F6A1B2C3D4E5F6A1B2C3D4.PNG"), "sb3")
        self.assertEqual(classify_asset_name("42.svg"), "sb2")
        self.assertIsNone(classify_asset_name("readme.txt"))
        self.assertIsNone(classify_asset_name("project.json"))
        self.assertIsNone(classify_asset_name("42.jpeg"))
        self.assertIsNone(classify_asset_name("sub/42.svg"))

    def test_counts_and_tie_break(self):
        self.assertEqual(count_assets([SB3_ASSET, "1.wav", "2.png", "x.txt"]), (2, 1))
        self.assertEqual(guess_type_from_assets(1, 0), "sb2")
        self.assertEqual(guess_type_from_assets(1, 1), "sb3")
        self.assertEqual(guess_type_from_assets(0, 0), "sb3")
        self.assertEqual(guess_type_from_assets(0, 3), "sb3")


class ZipProjectTests(unittest.TestCase):
    def _extract(self, entries):
        view = ArchiveView.open_or_none(_zip(entries))
        return extract_zip_project(view, view.find("project.json"))

    def test_sb3_with_stray_files(self):
        project = self._extract({"project.json": b"{}", SB3_ASSET: b"img", "readme.txt": b"hi", "index.html": b"x"})
        self.assertEqual(project.type, "sb3")
        self.assertEqual(sorted(_names(project.data)), sorted(["project.json", SB3_ASSET]))

    def test_sb2_assets_only(self):
        project = self._extract({"project.json": b"{}", "0.png": b"a", "1.wav": b"b"})
        self.assertEqual(project.type, "sb2")
        self.assertEqual(_names(project.data), ["project.json", "0.png", "1.wav"])

    def test_mixed_assets_lean_sb3(self):
        project = self._extract({"project.json": b"{}", "0.png": b"a", SB3_ASSET_2: b"b"})
        self.assertEqual(project.type, "sb3")

    def test_no_assets_lean_sb3(self):
        self.assertEqual(self._extract({"project.json": b"{}"}).type, "sb3")

    def test_nested_folder_only(self):
        project = self._extract({
            "outer.txt": b"o",
            "player/project.json": b'{"objName":"Stage"}',
            "player/3.svg": b"s",
            "player/lib/7.svg": b"deep",
        })
        self.assertEqual(project.type, "sb2")
        self.assertEqual(_names(project.data), ["project.json", "3.svg"])

    def test_strip_non_assets_count(self):
        view = ArchiveView()
        view.add("project.json", b"{}")
        view.add("a.js", b"")
        view.add("b.css", b"")
        view.add("5.png", b"")
        self.assertEqual(strip_non_assets(view), 2)
        self.assertEqual(view.names(), ["project.json", "5.png"])


if __name__ == "__main__":
    unittest.main()
