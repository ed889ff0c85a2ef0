"""Resolve the set of files to index from include/ignore glob patterns.

Include patterns are expanded with ``pathlib`` globbing relative to the
repository root; ignore patterns are tested with ``fnmatch`` against the
root-relative POSIX path.  Brace sets such as ``src/**/*.{ts,tsx}`` are
expanded before matching.
"""
import fnmatch
import logging
import re
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)

_BRACE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives, innermost first.

    ``"src/*.{ts,tsx}"`` -> ``["src/*.ts", "src/*.tsx"]``.  A pattern without
    braces is returned unchanged.
    """
    match = _BRACE.search(pattern)
    if match is None:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def matches_any(rel_path: str, patterns: Iterable[str]) -> bool:
    """Return True if *rel_path* matches one of *patterns*.

    A leading ``**/`` also matches at the repository root, so
    ``**/node_modules/**`` excludes ``node_modules/x.js``.
    """
    for raw in patterns:
        for pattern in expand_braces(raw):
            if fnmatch.fnmatch(rel_path, pattern):
                return True
            if pattern.startswith("**/") and fnmatch.fnmatch(rel_path, pattern[3:]):
                return True
    return False


def glob_pattern(pattern: str) -> str:
    """Rewrite a trailing ``**`` to ``**/*`` so it matches files.

    ``Path.glob`` treats a final ``**`` as directories only; ``src/**`` must
    select every file below ``src``.
    """
    if pattern == "**" or pattern.endswith("/**"):
        return pattern + "/*"
    return pattern


def resolve_files(root: Path, include: Iterable[str], ignore: Iterable[str]) -> List[str]:
    """Return root-relative POSIX paths of regular files to index.

    Order is first-seen across the include patterns, each pattern's matches
    sorted.  Symlinks and directories are skipped.
    """
    root = Path(root)
    ignore = list(ignore)
    seen: set[str] = set()
    files: List[str] = []

    for raw in include:
        for pattern in expand_braces(raw):
            for path in sorted(root.glob(glob_pattern(pattern))):
                if path.is_symlink() or not path.is_file():
                    continue
                rel = path.relative_to(root).as_posix()
                if rel in seen or matches_any(rel, ignore):
                    continue
                seen.add(rel)
                files.append(rel)

    logger.info("[FileMatcher] %d files matched under %s", len(files), root)
    return files
