"""
List-output parser — turn ``choco list -r`` output into a lookup map.

choco's "limit output" mode prints one ``name|version`` record per
line.  Names are case-folded so lookups are case-insensitive no
matter how the tool or the declaration spells them.
"""

from __future__ import annotations

from chocosync.core.models.package import NameVersionMap

LIST_DELIMITER = "|"


def parse_list_output(text: str, delimiter: str = LIST_DELIMITER) -> NameVersionMap:
    """Parse delimiter-separated list output into a name → version map.

    Rules:
        - blank lines are skipped
        - each line splits on the FIRST delimiter only
        - names are stripped and lowercased; last occurrence wins
        - a line without a delimiter (or with nothing after it) is a
          name with no version: it maps to ``None``

    Args:
        text: Raw stdout of the list command.
        delimiter: Single-character field separator.

    Returns:
        Mapping of lowercased package name to version (or None).
    """
    packages: NameVersionMap = {}

    for line in text.splitlines():
        name, _, version = line.partition(delimiter)
        name = name.strip().lower()
        if not name:
            continue
        packages[name] = version.strip() or None

    return packages
