"""
Tests for the loader CLI in main.py.

Run: pytest tests/test_main.py -v
"""

from eviction_explorer.main import main, parse_args


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.data_dir is None
        assert args.tracts_source is None
        assert args.timeout == 30.0
        assert args.verbose is False

    def test_overrides(self):
        args = parse_args(["--data-dir", "/tmp/d", "--census-source", "c.csv", "--timeout", "2"])
        assert args.data_dir == "/tmp/d"
        assert args.census_source == "c.csv"
        assert args.timeout == 2.0


class TestMain:
    def test_complete_folder_exits_zero(self, data_folder):
        assert main(["--data-dir", str(data_folder)]) == 0

    def test_failed_table_exits_one(self, data_folder, tmp_path):
        missing = tmp_path / "nowhere.csv"
        assert main(["--data-dir", str(data_folder), "--eviction-source", str(missing)]) == 1

    def test_env_data_dir(self, data_folder, monkeypatch):
        monkeypatch.setenv("EVICTION_DATA_DIR", str(data_folder))
        assert main([]) == 0
