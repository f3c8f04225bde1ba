"""
Codebase Consolidator - gather a project's source files for LLM ingestion.

This package walks a directory tree, filters files with .gitignore rules,
built-in exclusions and user patterns, and groups the surviving files into
projects discovered from ecosystem marker files (``package.json``,
``pom.xml``, ``*.csproj`` and friends).
"""

__version__ = "0.1.0"
__author__ = "Codebase Consolidator Team"
