# tests/test_runner.py

"""Tests for the headless CLI commands and argument parsing."""

import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from grocery_compare.cli import runner
from grocery_compare.config.settings import Settings
from grocery_compare.sources.json_source import JsonFileSource
from main import _build_parser

SNAPSHOT = str(Settings.DATA_PATH)


class TestBuildSource(unittest.TestCase):

    def test_explicit_snapshot(self) -> None:
        source = runner.build_source("some/file.json")
        assert isinstance(source, JsonFileSource)
        self.assertEqual(source.path, Path("some/file.json"))

    @patch("grocery_compare.cli.runner.Settings.SUPABASE_URL", "")
    def test_unconfigured_backend_uses_bundled_snapshot(self) -> None:
        source = runner.build_source(None)
        assert isinstance(source, JsonFileSource)
        self.assertEqual(source.path, Settings.DATA_PATH)


class TestCommands(unittest.IsolatedAsyncioTestCase):
    """Commands run against the bundled snapshot."""

    async def test_compare_json(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            code = await runner.run_compare(SNAPSHOT, None, "json")
        self.assertEqual(code, 0)

        groups = json.loads(out.getvalue())
        milk = groups[0]
        self.assertEqual(milk["name"], "Fresh Milk 1L")
        self.assertEqual(milk["lowest_price"], 42.0)
        self.assertEqual(len(milk["products"]), 2)
        self.assertEqual(milk["products"][0]["level"], "lowest")
        self.assertIsNotNone(milk["products"][0]["promotion_id"])

    async def test_compare_category(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            code = await runner.run_compare(SNAPSHOT, "wheat", "json")
        self.assertEqual(code, 0)
        names = [g["name"] for g in json.loads(out.getvalue())]
        self.assertEqual(names, ["Weetabix 430g"])

    async def test_compare_table(self) -> None:
        code = await runner.run_compare(SNAPSHOT, None, "table")
        self.assertEqual(code, 0)

    async def test_compare_missing_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            code = await runner.run_compare(
                str(Path(tmp) / "absent.json"), None, "json"
            )
        self.assertEqual(code, 1)

    async def test_promotions_store_filter(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            code = await runner.run_promotions(
                SNAPSHOT, "superu", None, True, "json"
            )
        self.assertEqual(code, 0)
        promotions = json.loads(out.getvalue())
        self.assertEqual([p["id"] for p in promotions], ["s-0877"])
        self.assertEqual(promotions[0]["savings"], 20.0)

    async def test_promotions_all(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            await runner.run_promotions(SNAPSHOT, None, None, False, "json")
        self.assertEqual(len(json.loads(out.getvalue())), 5)

    async def test_promotions_none_found(self) -> None:
        code = await runner.run_promotions(
            SNAPSHOT, "Intermart", None, True, "table"
        )
        self.assertEqual(code, 1)

    async def test_categories(self) -> None:
        self.assertEqual(await runner.run_categories(SNAPSHOT), 0)

    async def test_refresh(self) -> None:
        self.assertEqual(await runner.run_refresh(SNAPSHOT), 0)


class TestParser(unittest.TestCase):

    def test_compare_defaults(self) -> None:
        args = _build_parser().parse_args(["compare"])
        self.assertEqual(args.output_format, "table")
        self.assertIsNone(args.data_path)
        self.assertIsNone(args.category)

    def test_promotions_flags(self) -> None:
        args = _build_parser().parse_args(
            ["promotions", "-s", "Winners", "--all", "-f", "json"]
        )
        self.assertEqual(args.store, "Winners")
        self.assertFalse(args.catalog_only)
        self.assertEqual(args.output_format, "json")

    def test_command_required(self) -> None:
        with self.assertRaises(SystemExit):
            _build_parser().parse_args([])


if __name__ == "__main__":
    unittest.main()
