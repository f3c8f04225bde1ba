"""
Project discovery.

A project is a directory holding an ecosystem marker file (``package.json``,
``pom.xml``, ``*.csproj``...). Each ecosystem is described by a
:class:`ProjectStrategy` record; :func:`discover_projects` runs the shared
walk for any of them and returns ``{project name: [files]}``.

Names come from the marker content where the ecosystem records one and fall
back to the project directory's name. Unreadable or malformed markers only
cost the nicer name; they never stop discovery. Two markers resolving to the
same name leave the one discovered last.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .core import UnknownStrategyError, iter_files
from .ignore import IgnoreRuleSet

logger = logging.getLogger(__name__)

NameExtractor = Callable[[Path, Path], Optional[str]]
SourcePredicate = Callable[[Path, Path], bool]

# Errors that mean "this marker has no usable name"
_PARSE_ERRORS = (OSError, ValueError, RecursionError, ET.ParseError)


@dataclass(frozen=True)
class ProjectStrategy:
    """How to find and assemble the projects of one ecosystem.

    ``markers`` are equivalent file-name globs; ``fallback_markers`` are only
    searched when no primary marker exists anywhere under the root.
    ``extract_name`` receives the marker path and the discovery root and may
    return ``None``;
    ``is_source_file`` receives a candidate file and the project directory.
    """

    name: str
    markers: Tuple[str, ...]
    extract_name: NameExtractor
    is_source_file: SourcePredicate
    fallback_markers: Tuple[str, ...] = ()

    def discover(self, root: Path, rules: IgnoreRuleSet) -> Dict[str, List[Path]]:
        return discover_projects(root, rules, self)


# Shared engine
def _matches_marker(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def find_marker_files(root: Path, strategy: ProjectStrategy) -> List[Path]:
    markers = [p for p in iter_files(root) if _matches_marker(p.name, strategy.markers)]
    if not markers and strategy.fallback_markers:
        markers = [
            p for p in iter_files(root)
            if _matches_marker(p.name, strategy.fallback_markers)
        ]
    return markers


def project_name_for(marker: Path, strategy: ProjectStrategy, root: Path) -> str:
    """Name from the marker content, else the project directory's name."""
    try:
        name = strategy.extract_name(marker, root)
    except _PARSE_ERRORS as e:
        logger.warning("Could not read project name from %s: %s", marker, e)
        name = None
    if name and name.strip():
        return name.strip()
    return marker.parent.name


def discover_projects(
    root: Path,
    rules: IgnoreRuleSet,
    strategy: ProjectStrategy,
) -> Dict[str, List[Path]]:
    """Map project names to their files for every *strategy* marker below *root*.

    File lists follow walk order with the marker in front when the source
    predicate did not already pick it up.
    """
    root = Path(root).resolve()
    projects: Dict[str, List[Path]] = {}

    for marker in find_marker_files(root, strategy):
        if rules.is_ignored(marker):
            logger.debug("Skipping ignored marker: %s", marker)
            continue

        project_dir = marker.parent
        name = project_name_for(marker, strategy, root)

        files = [
            f for f in iter_files(project_dir)
            if not rules.is_ignored(f) and strategy.is_source_file(f, project_dir)
        ]
        if marker not in files:
            files.insert(0, marker)

        if name in projects:
            logger.debug("Project %r from %s replaces an earlier one", name, marker)
        projects[name] = files

    return projects


# Source-file predicates
def extension_predicate(*extensions: str) -> SourcePredicate:
    """Accept files whose lower-cased name ends with one of *extensions*."""
    suffixes = tuple(ext.lower() for ext in extensions)

    def _is_source(path: Path, project_dir: Path) -> bool:
        return path.name.lower().endswith(suffixes)

    return _is_source


ANDROID_RESOURCE_DIR_PREFIXES = (
    "drawable", "mipmap", "layout", "values", "menu", "raw", "font",
    "anim", "animator", "color", "navigation", "xml",
)
ANDROID_ASSET_DIR = "assets"

_gradle_extensions = extension_predicate(
    ".java", ".kt", ".kts", ".gradle", ".xml", ".properties", ".pro", ".json",
)


def _is_gradle_source(path: Path, project_dir: Path) -> bool:
    if _gradle_extensions(path, project_dir):
        return True
    if path.parent.name.lower().startswith(ANDROID_RESOURCE_DIR_PREFIXES):
        return True
    try:
        rel_dirs = path.parent.relative_to(project_dir).parts
    except ValueError:
        return False
    return ANDROID_ASSET_DIR in (part.lower() for part in rel_dirs)


# Name extractors
def name_from_stem(marker: Path, root: Path) -> Optional[str]:
    return marker.stem


def name_from_directory(marker: Path, root: Path) -> Optional[str]:
    # None lets project_name_for fall back to the directory
    return None


def json_name(marker: Path, root: Path) -> Optional[str]:
    """``"name"`` from a JSON manifest (``package.json``, ``composer.json``)."""
    with marker.open("r", encoding="utf-8-sig") as fh:
        data = json.load(fh)
    if isinstance(data, dict):
        name = data.get("name")
        if isinstance(name, str):
            return name
    return None


def maven_artifact_id(marker: Path, root: Path) -> Optional[str]:
    """``<artifactId>`` directly under the root element of a ``pom.xml``."""
    project = ET.parse(marker).getroot()
    ns = project.tag[1:].split("}", 1)[0] if project.tag.startswith("{") else ""
    element = project.find(f"{{{ns}}}artifactId" if ns else "artifactId")
    if element is None or element.text is None:
        return None
    return element.text


ANDROID_NS = "http://schemas.android.com/apk/res/android"
MANIFEST_LOCATIONS = ("src/main/AndroidManifest.xml", "AndroidManifest.xml")
SETTINGS_FILES = ("settings.gradle.kts", "settings.gradle")
PROPERTIES_FILE = "gradle.properties"
APP_NAME_KEYS = ("app.name", "appName", "APP_NAME")

_ROOT_PROJECT_RE = re.compile(r"""rootProject\.name\s*=\s*["']([^"']+)["']""")


def _manifest_label(project_dir: Path) -> Optional[str]:
    for location in MANIFEST_LOCATIONS:
        manifest = project_dir / location
        if not manifest.is_file():
            continue
        try:
            application = ET.parse(manifest).getroot().find("application")
        except _PARSE_ERRORS as e:
            logger.warning("Could not parse Android manifest %s: %s", manifest, e)
            continue
        if application is None:
            continue
        label = application.get(f"{{{ANDROID_NS}}}label")
        # "@string/app_name" points into resources
        if label and not label.startswith("@"):
            return label
    return None


def _settings_root_project(project_dir: Path, root: Path) -> Optional[str]:
    directories = [project_dir]
    # the parent is only consulted while it is still inside the scanned tree
    if project_dir != root and root in project_dir.parents:
        directories.append(project_dir.parent)
    for directory in directories:
        for filename in SETTINGS_FILES:
            settings = directory / filename
            if not settings.is_file():
                continue
            try:
                text = settings.read_text(encoding="utf-8")
            except _PARSE_ERRORS as e:
                logger.warning("Could not read %s: %s", settings, e)
                continue
            match = _ROOT_PROJECT_RE.search(text)
            if match:
                return match.group(1)
    return None


def _properties_app_name(project_dir: Path) -> Optional[str]:
    properties = project_dir / PROPERTIES_FILE
    if not properties.is_file():
        return None
    try:
        lines = properties.read_text(encoding="utf-8").splitlines()
    except _PARSE_ERRORS as e:
        logger.warning("Could not read %s: %s", properties, e)
        return None
    for line in lines:
        line = line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            key, sep, value = line.partition(":")
        if sep and key.strip() in APP_NAME_KEYS and value.strip():
            return value.strip()
    return None


def gradle_name(marker: Path, root: Path) -> Optional[str]:
    """Manifest label, then ``rootProject.name``, then a properties entry."""
    project_dir = marker.parent
    return (
        _manifest_label(project_dir)
        or _settings_root_project(project_dir, root)
        or _properties_app_name(project_dir)
    )


# Registered strategies
CSPROJ = ProjectStrategy(
    name="csproj",
    markers=("*.csproj", "*.fsproj", "*.vbproj"),
    extract_name=name_from_stem,
    is_source_file=extension_predicate(
        ".cs", ".fs", ".fsx", ".vb", ".csproj", ".fsproj", ".vbproj", ".sln",
        ".config", ".json", ".xml", ".resx", ".settings",
    ),
)

PACKAGE_JSON = ProjectStrategy(
    name="package.json",
    markers=("package.json",),
    extract_name=json_name,
    is_source_file=extension_predicate(
        ".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".json", ".css", ".scss",
        ".less", ".html", ".htm", ".vue", ".svelte", ".md", ".yml", ".yaml",
    ),
)

POM_XML = ProjectStrategy(
    name="pom.xml",
    markers=("pom.xml",),
    extract_name=maven_artifact_id,
    is_source_file=extension_predicate(
        ".java", ".kt", ".scala", ".xml", ".properties", ".yml", ".yaml", ".json",
    ),
)

COMPOSER_JSON = ProjectStrategy(
    name="composer.json",
    markers=("composer.json",),
    extract_name=json_name,
    is_source_file=extension_predicate(
        ".php", ".phtml", ".inc", ".twig", ".blade.php", ".json", ".yml",
        ".yaml", ".xml",
    ),
)

PYPROJECT_TOML = ProjectStrategy(
    name="pyproject.toml",
    markers=("pyproject.toml",),
    fallback_markers=("setup.py",),
    extract_name=name_from_directory,
    is_source_file=extension_predicate(
        ".py", ".pyx", ".pyi", ".toml", ".cfg", ".txt", ".yml", ".yaml",
        ".json", ".md",
    ),
)

GRADLE = ProjectStrategy(
    name="gradle",
    markers=("build.gradle", "build.gradle.kts"),
    extract_name=gradle_name,
    is_source_file=_is_gradle_source,
)

STRATEGIES: Dict[str, ProjectStrategy] = {
    s.name: s
    for s in (CSPROJ, PACKAGE_JSON, POM_XML, COMPOSER_JSON, PYPROJECT_TOML, GRADLE)
}


def get_strategy(name: str) -> ProjectStrategy:
    """Look up a strategy by key (case-insensitive)."""
    try:
        return STRATEGIES[name.lower()]
    except KeyError:
        supported = ", ".join(STRATEGIES)
        raise UnknownStrategyError(
            f"Unknown split strategy '{name}'. Supported strategies: {supported}"
        ) from None
