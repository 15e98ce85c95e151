# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from folio.config import installer


class TestConfigInstaller(unittest.TestCase):
    def test_user_config_dir_precedence(self) -> None:
        with mock.patch.dict(
            os.environ,
            {installer.XDG_CONFIG_ENV: "/tmp/xdg"},
            clear=False,
        ):
            with mock.patch.object(installer.sys, "platform", "linux"):
                self.assertEqual(installer._user_config_dir(), Path("/tmp/xdg/folio"))

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(installer.XDG_CONFIG_ENV, None)
            with mock.patch.object(installer.sys, "platform", "darwin"):
                with mock.patch.object(installer.Path, "home", return_value=Path("/Users/example")):
                    self.assertEqual(
                        installer._user_config_dir(),
                        Path("/Users/example/.config/folio"),
                    )

        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(installer.XDG_CONFIG_ENV, None)
            with mock.patch.object(installer.sys, "platform", "linux"):
                with mock.patch.object(installer, "user_config_dir", return_value="/opt/config/folio"):
                    self.assertEqual(installer._user_config_dir(), Path("/opt/config/folio"))

    def test_build_paths_maps_every_paper_size(self) -> None:
        with mock.patch.object(installer, "_user_config_dir", return_value=Path("/tmp/usercfg")):
            paths = installer._build_paths()

        self.assertEqual(paths.user_config_dir, Path("/tmp/usercfg"))
        self.assertEqual(
            paths.user_paper_configs,
            {"A4": Path("/tmp/usercfg/a4.toml"), "LETTER": Path("/tmp/usercfg/letter.toml")},
        )

    def test_init_user_config_copies_without_overwriting(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "cfg"
            with mock.patch.object(installer, "_user_config_dir", return_value=root):
                self.assertTrue(installer.user_config_needs_init())

                root.mkdir()
                (root / "a4.toml").write_text("# edited\n", encoding="utf-8")
                self.assertEqual(installer.init_user_config(), root)

                self.assertEqual((root / "a4.toml").read_text(encoding="utf-8"), "# edited\n")
                self.assertEqual(
                    (root / "letter.toml").read_bytes(),
                    installer.PAPER_CONFIGS["LETTER"].read_bytes(),
                )
                self.assertFalse(installer.user_config_needs_init())

    def test_resolve_config_path_order(self) -> None:
        self.assertEqual(installer.resolve_config_path("custom.toml"), Path("custom.toml"))

        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            with mock.patch.object(installer, "_user_config_dir", return_value=root):
                with mock.patch.dict(os.environ, {}, clear=False):
                    os.environ.pop(installer.CONFIG_ENV, None)
                    os.environ.pop(installer.PAPER_SIZE_ENV, None)

                    self.assertEqual(installer.resolve_config_path(), installer.DEFAULT_CONFIG_PATH)
                    self.assertEqual(
                        installer.resolve_config_path(paper_size="letter"),
                        installer.PAPER_CONFIGS["LETTER"],
                    )

                    user_a4 = root / "a4.toml"
                    user_a4.write_text("", encoding="utf-8")
                    self.assertEqual(installer.resolve_config_path(), user_a4)

                    os.environ[installer.PAPER_SIZE_ENV] = "Letter"
                    self.assertEqual(
                        installer.resolve_config_path(), installer.PAPER_CONFIGS["LETTER"]
                    )

                    os.environ[installer.CONFIG_ENV] = str(root / "env.toml")
                    self.assertEqual(installer.resolve_config_path(), root / "env.toml")
                    self.assertEqual(
                        installer.resolve_config_path("explicit.toml"), Path("explicit.toml")
                    )

    def test_unknown_paper_size(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(installer.CONFIG_ENV, None)
            with self.assertRaisesRegex(ValueError, "unknown paper size: A5"):
                installer.resolve_config_path(paper_size="A5")


if __name__ == "__main__":
    unittest.main()
