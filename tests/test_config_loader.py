from __future__ import annotations

from pathlib import Path
import tempfile
import textwrap
import unittest

from core.config_loader import load_config_file, normalize_string_list, register_loader
from vsmatrix.config_loader import Settings
from vsmatrix.matrix import Platform


class SettingsLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_loads_toml_settings(self) -> None:
        path = self.root / "vsmatrix.toml"
        path.write_text(
            textwrap.dedent(
                """
                [global]
                log_level = "debug"

                [matrix]
                platforms = ["Android", "Windows"]

                [warnings]
                level = 3
                as_errors = true
                response_files = ["csc.rsp"]

                [paths]
                project_root = "unity"

                [defines]
                Android = "USE_ADS; CHEATS;"
                iOS = ["IOS_ONLY"]

                [[assemblies]]
                name = "Game.Editor"
                editor = true
                source_files = ["Assets/Editor/Tool.cs"]
                definition = "Assets/Editor/Game.Editor.asmdef"
                """
            )
        )

        settings = Settings.from_file(path)

        self.assertEqual(settings.global_config.log_level, "debug")
        self.assertEqual(settings.matrix.platforms, (Platform.WINDOWS, Platform.ANDROID))
        self.assertEqual(settings.warnings.level, 3)
        self.assertTrue(settings.warnings.as_errors)
        self.assertEqual(settings.warnings.response_files, ["csc.rsp"])
        self.assertEqual(settings.project_root, (self.root / "unity").resolve())
        self.assertEqual(settings.defines[Platform.ANDROID], ["USE_ADS", "CHEATS"])
        self.assertEqual(settings.defines[Platform.IOS], ["IOS_ONLY"])
        self.assertEqual(len(settings.assemblies), 1)
        self.assertTrue(settings.assemblies[0].editor)
        self.assertEqual(settings.assemblies[0].definition, "Assets/Editor/Game.Editor.asmdef")
        self.assertEqual(settings.source, path)

    def test_loads_yaml_settings(self) -> None:
        path = self.root / "vsmatrix.yaml"
        path.write_text(
            textwrap.dedent(
                """
                defines:
                  Windows: STEAM
                assemblies:
                  - name: Game
                    source_files: [Assets/Scripts/Player.cs]
                """
            )
        )
        settings = Settings.from_file(path)
        self.assertEqual(settings.defines[Platform.WINDOWS], ["STEAM"])
        self.assertEqual(settings.assemblies[0].source_files, ["Assets/Scripts/Player.cs"])
        self.assertEqual(settings.matrix.platforms, tuple(Platform))

    def test_defaults_when_no_settings_file(self) -> None:
        settings = Settings.discover(self.root)
        self.assertEqual(settings.project_root, self.root.resolve())
        self.assertEqual(settings.warnings.level, 4)
        self.assertFalse(settings.warnings.as_errors)
        self.assertEqual(settings.warnings.response_files, ["mcs.rsp", "csc.rsp"])
        self.assertIsNone(settings.source)

    def test_discover_prefers_toml(self) -> None:
        (self.root / "vsmatrix.json").write_text('{"global": {"log_level": "info"}}')
        (self.root / "vsmatrix.toml").write_text('[global]\nlog_level = "debug"\n')
        self.assertEqual(Settings.discover(self.root).global_config.log_level, "debug")

    def test_unknown_platform_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Settings.from_mapping({"matrix": {"platforms": ["Switch"]}})
        with self.assertRaises(ValueError):
            Settings.from_mapping({"defines": {"PS5": "X"}})

    def test_invalid_warning_level_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Settings.from_mapping({"warnings": {"level": 7}})
        with self.assertRaises(TypeError):
            Settings.from_mapping({"warnings": {"as_errors": "yes"}})

    def test_assembly_entries_require_names(self) -> None:
        with self.assertRaises(ValueError):
            Settings.from_mapping({"assemblies": [{"editor": True}]})


class SharedLoaderTests(unittest.TestCase):
    def test_unsupported_suffix_raises(self) -> None:
        with self.assertRaises(ValueError):
            load_config_file(Path("settings.ini"))

    def test_register_loader_requires_dot(self) -> None:
        with self.assertRaises(ValueError):
            register_loader("ini", lambda stream: {})

    def test_normalize_string_list_splits_on_separator(self) -> None:
        self.assertEqual(normalize_string_list("A;B;;C", separator=";"), ["A", "B", "C"])
        self.assertEqual(normalize_string_list(["A ", " ", "B"]), ["A", "B"])
        with self.assertRaises(TypeError):
            normalize_string_list([1, 2], field_name="defines")


if __name__ == "__main__":
    unittest.main()
