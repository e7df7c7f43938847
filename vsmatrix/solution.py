"""Rewrites the global configuration section of a Visual Studio solution."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .errors import StructureError
from .matrix import DEBUG_CONFIG, ConfigurationMatrix


SOLUTION_PLATFORM = "Any CPU"


@dataclass(frozen=True, slots=True)
class SolutionProject:
    name: str
    guid: str


def parse_project_line(line: str) -> SolutionProject:
    """Parse ``Project("{type}") = "Name", "Path", "{guid}"``."""

    _, separator, declaration = line.partition("=")
    values = [value.strip().strip('"').strip() for value in declaration.split(",")]
    if not separator or len(values) < 3 or not values[0] or not values[2]:
        raise StructureError(f"Malformed project declaration: {line.strip()}")
    return SolutionProject(name=values[0], guid=values[2])


def split_solution(text: str) -> tuple[List[str], List[SolutionProject]]:
    """Return the lines preceding ``Global`` and the projects they declare."""

    preamble: List[str] = []
    projects: List[SolutionProject] = []
    for line in text.splitlines():
        if line.strip() == "Global":
            return preamble, projects
        if line.startswith("Project"):
            projects.append(parse_project_line(line))
        preamble.append(line)
    raise StructureError("Solution has no Global section")


class SolutionRewriter:
    def __init__(self, matrix: ConfigurationMatrix) -> None:
        self._matrix = matrix

    def _configuration_lines(self) -> List[str]:
        lines = [f"\t\t{DEBUG_CONFIG}|{SOLUTION_PLATFORM} = {DEBUG_CONFIG}|{SOLUTION_PLATFORM}"]
        for name in self._matrix.names():
            lines.append(f"\t\t{name}|{SOLUTION_PLATFORM} = {name}|{SOLUTION_PLATFORM}")
        return lines

    def _project_lines(self, project: SolutionProject) -> List[str]:
        debug = f"{DEBUG_CONFIG}|{SOLUTION_PLATFORM}"
        lines = [
            f"\t\t{project.guid}.{debug}.ActiveCfg = {debug}",
            f"\t\t{project.guid}.{debug}.Build.0 = {debug}",
        ]
        for triple in self._matrix:
            config = f"{triple.config_name}|{SOLUTION_PLATFORM}"
            if self._matrix.is_valid(project.name, triple):
                lines.append(f"\t\t{project.guid}.{config}.ActiveCfg = {config}")
                lines.append(f"\t\t{project.guid}.{config}.Build.0 = {config}")
            else:
                lines.append(f"\t\t{project.guid}.{config}.ActiveCfg = {debug}")
        return lines

    def rewrite(self, text: str) -> str:
        newline = "\r\n" if "\r\n" in text else "\n"
        preamble, projects = split_solution(text)

        lines = list(preamble)
        lines.append("Global")
        lines.append("\tGlobalSection(SolutionConfigurationPlatforms) = preSolution")
        lines.extend(self._configuration_lines())
        lines.append("\tEndGlobalSection")
        lines.append("\tGlobalSection(ProjectConfigurationPlatforms) = postSolution")
        for project in projects:
            lines.extend(self._project_lines(project))
        lines.append("\tEndGlobalSection")
        lines.append("\tGlobalSection(SolutionProperties) = preSolution")
        lines.append("\t\tHideSolutionNode = FALSE")
        lines.append("\tEndGlobalSection")
        lines.append("EndGlobal")
        return newline.join(lines) + newline


__all__ = ["SolutionProject", "SolutionRewriter", "parse_project_line", "split_solution"]
