"""Tests for info.py -- collect_install_info() and its renderers."""

from kit_updater.info import collect_install_info, format_install_info, info_to_json


class TestCollectInstallInfo:
    def test_counts_per_top_level_directory(self, installed_root):
        info = collect_install_info(installed_root)

        assert info.installed
        assert info.config_present
        assert info.version == "1.0"
        assert info.file_counts == {".": 1, "agents": 1, "notes": 1}
        assert info.total_files == 3

    def test_missing_tree(self, tmp_path):
        info = collect_install_info(tmp_path / "absent")
        assert not info.installed
        assert format_install_info(info).startswith("Not installed")

    def test_missing_config(self, installed_root):
        (installed_root / "core-config.yaml").unlink()
        info = collect_install_info(installed_root)
        assert not info.config_present
        assert info.version == "unknown"
        assert "(missing)" in format_install_info(info)


class TestFormatting:
    def test_text(self, installed_root):
        text = format_install_info(collect_install_info(installed_root))
        assert "Version: 1.0" in text
        assert "  agents/: 1" in text
        assert "  (root): 1" in text
        assert "Total: 3 files" in text

    def test_json(self, installed_root):
        data = info_to_json(collect_install_info(installed_root))
        assert data["version"] == "1.0"
        assert data["total_files"] == 3
        assert data["installed_root"] == str(installed_root)
