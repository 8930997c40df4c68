"""CLI argument handling and command-loop behavior tests.

Verifies how ``lookat.cli.main`` builds the working set and hands the session
to the command loop, and how the loop reports errors without stopping.
"""

from __future__ import annotations

import io
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lookat import cli
from lookat.filters import FilterConfig
from lookat.host import TerminalHost
from lookat.session import LookSession, SessionStatus


def _make_tree(root: Path) -> None:
    (root / "a.txt").write_text("alpha\n", encoding="utf-8")
    (root / "b.txt").write_text("beta needle\n", encoding="utf-8")
    (root / "archive.zip").write_bytes(b"PK\x03\x04")
    (root / "sub").mkdir()
    (root / "sub" / "c.txt").write_text("gamma\n", encoding="utf-8")


def _scripted(lines: list[str]):
    queue = list(lines)

    def read_line(_prompt: str) -> str:
        if not queue:
            raise EOFError
        return queue.pop(0)

    return read_line


class CliMainTests(unittest.TestCase):
    def test_list_prints_working_set_relative_to_base(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            stdout = io.StringIO()

            with (
                mock.patch.object(sys, "argv", ["lookat", "--list"]),
                mock.patch("lookat.cli.load_filter_config", return_value=FilterConfig()),
                mock.patch("lookat.cli.load_style_name", return_value=None),
                mock.patch("sys.stdout", stdout),
            ):
                cli.main(default_dir=root)

            self.assertEqual(stdout.getvalue().splitlines(), ["a.txt", "b.txt", str(Path("sub") / "c.txt")])

    def test_flags_extend_persisted_filters(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            stdout = io.StringIO()

            with (
                mock.patch.object(
                    sys,
                    "argv",
                    ["lookat", "--list", "--no-recurse", "--exclude-file", r"^b\.", str(root)],
                ),
                mock.patch("lookat.cli.load_filter_config", return_value=FilterConfig()),
                mock.patch("lookat.cli.load_style_name", return_value=None),
                mock.patch("sys.stdout", stdout),
            ):
                cli.main(default_dir=root)

            self.assertEqual(stdout.getvalue().splitlines(), ["a.txt"])

    def test_save_config_persists_effective_filters(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            with (
                mock.patch.object(sys, "argv", ["lookat", "--list", "--show-subdirs", "--save-config"]),
                mock.patch("lookat.cli.load_filter_config", return_value=FilterConfig()),
                mock.patch("lookat.cli.load_style_name", return_value=None),
                mock.patch("lookat.cli.save_filter_config") as save_filter_config,
                mock.patch("sys.stdout", io.StringIO()),
            ):
                cli.main(default_dir=root)

            save_filter_config.assert_called_once()
            saved = save_filter_config.call_args.args[0]
            self.assertTrue(saved.show_subdirectories)
            self.assertTrue(saved.recurse_directories)

    def test_main_hands_loaded_session_to_command_loop(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            with (
                mock.patch.object(sys, "argv", ["lookat", "*.txt", "--rows", "3"]),
                mock.patch("lookat.cli.load_filter_config", return_value=FilterConfig()),
                mock.patch("lookat.cli.load_style_name", return_value=None),
                mock.patch("lookat.cli.run_command_loop") as run_command_loop,
            ):
                cli.main(default_dir=root)

            run_command_loop.assert_called_once()
            session = run_command_loop.call_args.args[0]
            self.assertEqual(session.state.status, SessionStatus.VIEWING)
            self.assertEqual(session.state.path, root / "a.txt")
            self.assertEqual([p.name for p in session.cursor.paths()], ["a.txt", "b.txt"])
            self.assertEqual(session.host.view.rows, 3)

    def test_marked_paths_are_loaded_before_arguments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)

            with (
                mock.patch.object(
                    sys,
                    "argv",
                    ["lookat", "--mark", str(root / "b.txt"), "--append", "a.txt"],
                ),
                mock.patch("lookat.cli.load_filter_config", return_value=FilterConfig()),
                mock.patch("lookat.cli.load_style_name", return_value=None),
                mock.patch("lookat.cli.run_command_loop") as run_command_loop,
            ):
                cli.main(default_dir=root)

            session = run_command_loop.call_args.args[0]
            self.assertEqual([p.name for p in session.cursor.paths()], ["b.txt", "a.txt"])
            self.assertEqual(session.state.path, root / "a.txt")


class ExpandArgumentsTests(unittest.TestCase):
    def test_globs_literals_and_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            host = TerminalHost(root)

            self.assertEqual(cli.expand_arguments(host, ["*.txt"]), [root / "a.txt", root / "b.txt"])
            self.assertEqual(cli.expand_arguments(host, ["sub"]), [root / "sub"])
            self.assertEqual(cli.expand_arguments(host, ["*.nothing"]), [])
            self.assertEqual(
                cli.expand_arguments(host, []),
                [root / "a.txt", root / "archive.zip", root / "b.txt", root / "sub"],
            )


class CommandLoopTests(unittest.TestCase):
    def _session(self, root: Path) -> LookSession:
        host = TerminalHost(root, rows=2, no_color=True)
        session = LookSession(host)
        session.load_files([root / "a.txt", root / "b.txt", root / "sub" / "c.txt"])
        return session

    def test_navigation_commands_and_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            session = self._session(root)
            out = io.StringIO()

            cli.run_command_loop(session, _scripted(["n 2", "p", "bogus", "g 9", "s colour", "q"]), out)

            output = out.getvalue()
            self.assertIn("[0<] a.txt [>2]\nalpha\n", output)
            self.assertIn("[2<] sub/c.txt [>0]\ngamma\n", output)
            self.assertIn("unknown command: bogus (h for help)", output)
            self.assertIn("index 9 out of range [-3, 2]", output)
            self.assertIn("unknown sort key: colour", output)
            self.assertEqual(session.state.path, root / "b.txt")

    def test_search_failure_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            session = self._session(root)
            out = io.StringIO()

            cli.run_command_loop(session, _scripted(["/ needle", "/ missing", "/ ("]), out)

            output = out.getvalue()
            self.assertEqual(session.state.path, root / "b.txt")
            self.assertIn("search failed", output)
            self.assertIn("missing )", output)

    def test_exhausted_list_prints_hint_and_end_of_input_stops(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            session = self._session(root)
            out = io.StringIO()

            cli.run_command_loop(session, _scripted(["n 5"]), out)

            self.assertIn("[3<] end of list, go back for more\n", out.getvalue())
            self.assertIs(session.state.status, SessionStatus.EXHAUSTED)

    def test_help_lists_commands(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _make_tree(root)
            out = io.StringIO()

            cli.run_command_loop(self._session(root), _scripted(["h", "quit"]), out)

            self.assertIn(cli.HELP_TEXT, out.getvalue())


if __name__ == "__main__":
    unittest.main()
