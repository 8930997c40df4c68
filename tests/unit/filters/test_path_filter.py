"""Tests for path admission and working-set construction."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lookat.filters import AdmitDecision, FilterConfig, PathFilter, build_working_set


def _touch(path: Path, text: str = "x\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _make_tree(root: Path) -> None:
    _touch(root / "a.txt")
    _touch(root / "photo.jpg")
    _touch(root / "archive.zip")
    _touch(root / "sub" / "b.txt")
    _touch(root / "sub" / "deep" / "c.txt")
    _touch(root / ".git" / "config")
    _touch(root / "skipme" / "d.txt")


class PathFilterAdmitTests(unittest.TestCase):
    def test_zip_files_are_rejected_by_file_patterns(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            photo = _touch(root / "photo.jpg")
            archive = _touch(root / "archive.zip")
            path_filter = PathFilter(FilterConfig(file_exclusions=(r"\.zip$",)))

            self.assertIs(path_filter.admit(photo), AdmitDecision.ADMITTED)
            self.assertIs(path_filter.admit(archive), AdmitDecision.SKIPPED_FILE)

    def test_directory_patterns_match_directory_names(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / ".git").mkdir()
            (root / "src").mkdir()
            path_filter = PathFilter()

            self.assertIs(path_filter.admit(root / ".git"), AdmitDecision.SKIPPED_DIRECTORY)
            self.assertIs(path_filter.admit(root / "src"), AdmitDecision.ADMITTED)

    def test_file_patterns_do_not_apply_to_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "bundle.zip").mkdir()

            self.assertIs(PathFilter().admit(root / "bundle.zip"), AdmitDecision.ADMITTED)

    def test_missing_and_broken_link_paths_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            broken = root / "dangling"
            os.symlink(root / "nowhere", broken)
            path_filter = PathFilter()

            self.assertIs(path_filter.admit(broken), AdmitDecision.SKIPPED_OTHER)
            self.assertIs(path_filter.admit(root / "missing.txt"), AdmitDecision.SKIPPED_OTHER)

    def test_invalid_patterns_are_ignored_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = _touch(root / "a(b.txt")
            with self.assertLogs("lookat.filters", level="WARNING"):
                path_filter = PathFilter(FilterConfig(file_exclusions=("(",)))

            self.assertIs(path_filter.admit(target), AdmitDecision.ADMITTED)


class ExpandDirectoryTests(unittest.TestCase):
    def test_recursive_expansion_is_depth_first_pre_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            (root / "sub" / "alpha").mkdir()

            expanded = PathFilter().expand_directory(root)

            self.assertEqual(
                expanded,
                [
                    root,
                    root / "skipme",
                    root / "sub",
                    root / "sub" / "alpha",
                    root / "sub" / "deep",
                ],
            )

    def test_without_recursion_only_the_directory_is_returned(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            expanded = PathFilter(FilterConfig(recurse_directories=False)).expand_directory(root)

            self.assertEqual(expanded, [root])

    def test_excluded_directories_are_not_descended(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            config = FilterConfig(directory_exclusions=(r"^\.git$", r"^sub$"))

            expanded = PathFilter(config).expand_directory(root)

            self.assertEqual(expanded, [root, root / "skipme"])

    def test_directory_symlinks_are_not_followed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "real").mkdir()
            os.symlink(root, root / "real" / "loop")

            expanded = PathFilter().expand_directory(root)

            self.assertEqual(expanded, [root, root / "real"])

    def test_unreadable_child_entries_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "locked").mkdir()
            (root / "open").mkdir()
            original_is_symlink = Path.is_symlink

            def is_symlink(path: Path) -> bool:
                if path.name == "locked":
                    raise PermissionError(13, "Permission denied", str(path))
                return original_is_symlink(path)

            with mock.patch.object(Path, "is_symlink", autospec=True, side_effect=is_symlink):
                expanded = PathFilter().expand_directory(root)

            self.assertEqual(expanded, [root, root / "open"])


class BuildWorkingSetTests(unittest.TestCase):
    def test_directory_files_follow_expansion_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            working_set = build_working_set([root])

            self.assertEqual(
                working_set.files,
                [
                    root / "a.txt",
                    root / "photo.jpg",
                    root / "skipme" / "d.txt",
                    root / "sub" / "b.txt",
                    root / "sub" / "deep" / "c.txt",
                ],
            )
            self.assertEqual(
                working_set.subdirectories,
                [root, root / "skipme", root / "sub", root / "sub" / "deep"],
            )

    def test_inputs_keep_their_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            working_set = build_working_set([root / "sub", root / "a.txt", root / "archive.zip"])

            self.assertEqual(
                working_set.files,
                [root / "sub" / "b.txt", root / "sub" / "deep" / "c.txt", root / "a.txt"],
            )

    def test_non_recursive_directory_contributes_own_files_only(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            working_set = build_working_set([root], FilterConfig(recurse_directories=False))

            self.assertEqual(working_set.files, [root / "a.txt", root / "photo.jpg"])
            self.assertEqual(working_set.subdirectories, [root])

    def test_duplicates_are_collected_once(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = _touch(root / "a.txt")

            working_set = build_working_set([target, root / "." / "a.txt", root])

            self.assertEqual(working_set.files, [target])

    def test_relative_inputs_become_absolute(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _touch(root / "a.txt")
            previous_cwd = Path.cwd()
            try:
                os.chdir(root)
                working_set = build_working_set(["a.txt"])
            finally:
                os.chdir(previous_cwd)

            self.assertEqual(working_set.files, [root / "a.txt"])

    def test_missing_inputs_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = _touch(root / "a.txt")

            working_set = build_working_set([root / "gone.txt", target])

            self.assertEqual(working_set.files, [target])


if __name__ == "__main__":
    unittest.main()
