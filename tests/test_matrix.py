from __future__ import annotations

import unittest

from vsmatrix.matrix import (
    ConfigurationMatrix,
    Platform,
    Target,
    Triple,
    Variant,
    config_name,
    enumerate_triples,
    is_reserved_name,
    parse_config_name,
)
from vsmatrix.metadata import AssemblyDefinition, AssemblyInfo, AssemblyRecord, MetadataResolver


class StaticAssemblySource:
    def __init__(self, records=()) -> None:
        self.records = list(records)

    def load_assemblies(self):
        return list(self.records)


def make_matrix(*records: AssemblyRecord, platforms=None) -> ConfigurationMatrix:
    return ConfigurationMatrix(MetadataResolver(StaticAssemblySource(records)), platforms)


class ConfigNameTests(unittest.TestCase):
    def test_enumerates_platform_major_order(self) -> None:
        names = [config_name(triple) for triple in enumerate_triples()]
        self.assertEqual(len(names), 18)
        self.assertEqual(
            names[:4],
            [
                "vs_Windows_Editor_Clean",
                "vs_Windows_Editor_Custom",
                "vs_Windows_Player_Clean",
                "vs_Windows_Player_Custom",
            ],
        )
        self.assertEqual(names[-1], "vs_Android_Player_Custom")

    def test_names_are_unique_and_round_trip(self) -> None:
        triples = enumerate_triples()
        names = {config_name(triple) for triple in triples}
        self.assertEqual(len(names), len(triples))
        self.assertNotIn("Debug", names)
        self.assertNotIn("Release", names)
        for triple in triples:
            self.assertEqual(parse_config_name(config_name(triple)), triple)

    def test_parse_rejects_foreign_names(self) -> None:
        self.assertIsNone(parse_config_name("Debug"))
        self.assertIsNone(parse_config_name("vs_Linux_Editor_Clean"))
        self.assertIsNone(parse_config_name("vs_Windows_Editor"))

    def test_platform_subset_keeps_enum_order(self) -> None:
        triples = enumerate_triples([Platform.ANDROID, Platform.WINDOWS])
        self.assertEqual(len(triples), 8)
        self.assertIs(triples[0].platform, Platform.WINDOWS)
        self.assertIs(triples[-1].platform, Platform.ANDROID)

    def test_reserved_condition_detection(self) -> None:
        self.assertTrue(is_reserved_name(" '$(Configuration)|$(Platform)' == 'vs_iOS_Player_Clean|AnyCPU' "))
        self.assertFalse(is_reserved_name(" '$(Configuration)|$(Platform)' == 'Debug|AnyCPU' "))

    def test_platform_from_name_is_case_insensitive(self) -> None:
        self.assertIs(Platform.from_name("ios"), Platform.IOS)
        with self.assertRaises(ValueError):
            Platform.from_name("Switch")


class ValidityTests(unittest.TestCase):
    def test_unknown_project_is_valid_everywhere(self) -> None:
        matrix = make_matrix()
        self.assertEqual(len(matrix.valid_triples("Game")), 18)

    def test_editor_project_only_gets_editor_triples(self) -> None:
        matrix = make_matrix(AssemblyRecord(AssemblyInfo(name="Tools", editor=True)))
        valid = matrix.valid_triples("Tools")
        self.assertEqual(len(valid), 6)
        self.assertTrue(all(triple.target is Target.EDITOR for triple in valid))

    def test_editor_name_marker_marks_editor_project(self) -> None:
        matrix = make_matrix()
        self.assertFalse(matrix.is_valid("Game.Editor", Triple(Platform.IOS, Target.PLAYER, Variant.CLEAN)))
        self.assertTrue(matrix.is_valid("Game.Editor", Triple(Platform.IOS, Target.EDITOR, Variant.CLEAN)))

    def test_package_project_is_never_valid(self) -> None:
        matrix = make_matrix(
            AssemblyRecord(AssemblyInfo(name="Unity.Timeline", source_files=["Packages/com.unity.timeline/Runtime/Clip.cs"]))
        )
        self.assertEqual(matrix.valid_triples("Unity.Timeline"), [])

    def test_include_list_matches_platform_substring_or_target(self) -> None:
        matrix = make_matrix(
            AssemblyRecord(
                AssemblyInfo(name="Mobile"),
                AssemblyDefinition(name="Mobile", include_platforms=["Android", "Editor"]),
            )
        )
        valid = {triple.config_name for triple in matrix.valid_triples("Mobile")}
        self.assertIn("vs_Android_Player_Clean", valid)
        self.assertIn("vs_Windows_Editor_Custom", valid)
        self.assertNotIn("vs_iOS_Player_Clean", valid)
        self.assertEqual(len(valid), 8)

    def test_exclude_list_removes_matching_platforms(self) -> None:
        matrix = make_matrix(
            AssemblyRecord(
                AssemblyInfo(name="Desktop"),
                AssemblyDefinition(name="Desktop", exclude_platforms=["WindowsStandalone64"]),
            )
        )
        valid = matrix.valid_triples("Desktop")
        self.assertEqual(len(valid), 12)
        self.assertTrue(all(triple.platform is not Platform.WINDOWS for triple in valid))

    def test_include_list_takes_precedence_over_exclude_list(self) -> None:
        definition = AssemblyDefinition(name="Both", include_platforms=["iOS"], exclude_platforms=["iOS"])
        self.assertTrue(definition.is_valid_platform(Platform.IOS, Target.PLAYER))
        self.assertFalse(definition.is_valid_platform(Platform.ANDROID, Target.PLAYER))


if __name__ == "__main__":
    unittest.main()
