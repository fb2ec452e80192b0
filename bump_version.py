"""Set the project version in pyproject.toml and ews/__init__.py.

Usage: python bump_version.py 0.2.0
"""
import re
import sys
from pathlib import Path

from tomlkit import parse, dumps

VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+([ab]\d+|rc\d+)?$")
INIT_VERSION_LINE = re.compile(r'^__version__ = ".*"$', re.MULTILINE)


def bump_version(version: str, root: Path = Path(".")) -> None:
    if not VERSION_PATTERN.match(version):
        raise ValueError(f"Invalid version string \"{version}\"")

    pyproject = root / "pyproject.toml"
    doc = parse(pyproject.read_text())
    doc["project"]["version"] = version
    pyproject.write_text(dumps(doc))

    init_file = root / "ews" / "__init__.py"
    init_file.write_text(
        INIT_VERSION_LINE.sub(f'__version__ = "{version}"', init_file.read_text())
    )


if __name__ == "__main__":
    bump_version(sys.argv[1])
