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

import io
import json
import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path

from pypdf import PdfReader

from tests.test_support import playwright_ready, sectioned_record, statement_record

REPO_ROOT = Path(__file__).resolve().parents[2]
CONFIG_PATH = REPO_ROOT / "src" / "folio" / "config" / "a4.toml"


def _cli_env(tmp_path: Path) -> dict[str, str]:
    env = dict(os.environ)
    src = str(REPO_ROOT / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, (src, env.get("PYTHONPATH"))))
    env["XDG_CONFIG_HOME"] = str(tmp_path / "xdg")
    env.pop("FOLIO_CONFIG", None)
    return env


def _run_cli(tmp_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, "-m", "folio", "--config", str(CONFIG_PATH), *args],
        cwd=REPO_ROOT,
        env=_cli_env(tmp_path),
        capture_output=True,
        text=True,
        check=False,
    )


def _page_count(path: Path) -> int:
    return len(PdfReader(io.BytesIO(path.read_bytes())).pages)


class TestEndToEndCli(unittest.TestCase):
    def test_render_boq_with_raster_backend(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            record_path = tmp_path / "boq.json"
            record_path.write_text(json.dumps(sectioned_record(3, 4)), encoding="utf-8")
            output_path = tmp_path / "boq.pdf"

            result = _run_cli(
                tmp_path,
                "render",
                str(record_path),
                "--kind",
                "bill-of-quantities",
                "--output",
                str(output_path),
            )

            self.assertEqual(result.returncode, 0, result.stderr)
            self.assertEqual(_page_count(output_path), 3)
            self.assertIn("(3 pages)", result.stdout)

    def test_render_failure_exits_with_code_two(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            record = statement_record()
            record["payments"][0]["amount"] = "lots"
            record_path = tmp_path / "statement.json"
            record_path.write_text(json.dumps(record), encoding="utf-8")

            result = _run_cli(tmp_path, "render", str(record_path), "--kind", "statement")

            self.assertEqual(result.returncode, 2)
            self.assertIn("validation error", result.stderr)
            self.assertFalse(record_path.with_suffix(".pdf").exists())

    @unittest.skipUnless(playwright_ready(), "Chromium for Playwright is not installed")
    def test_render_with_browser_backend(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp_path = Path(tmpdir)
            record_path = tmp_path / "quote.json"
            record_path.write_text(
                json.dumps(sectioned_record(2, 3, kind="quotation")), encoding="utf-8"
            )

            result = _run_cli(tmp_path, "--backend", "browser", "render", str(record_path))

            self.assertEqual(result.returncode, 0, result.stderr)
            self.assertGreaterEqual(_page_count(record_path.with_suffix(".pdf")), 1)


if __name__ == "__main__":
    unittest.main()
