"""Helpers for parsing unified diffs into UI-friendly structures."""

from __future__ import annotations

import re

from tailview.models import ChangeKind, DiffLine, FileDiffRecord, LineKind

BOUNDARY_PREFIXES = ("diff --git", "diff --cc", "diff --combined")
METADATA_PREFIXES = BOUNDARY_PREFIXES + (
    "index ",
    "new file mode",
    "deleted file mode",
    "old mode",
    "new mode",
    "rename from",
    "rename to",
    "similarity index",
    "dissimilarity index",
    "copy from",
    "copy to",
)

UNKNOWN_PATH = "Unknown file"
PREAMBLE_PATH = "Changes"
WHOLE_INPUT_PATH = "All Changes"

_B_PATH = re.compile(r"""\s["']?b/(.+?)["']?$""")
_NULL_PATHS = ("/dev/null", "dev/null")
_LINE_SPLIT = re.compile(r"\r?\n")


def classify_diff_line(line: str) -> LineKind:
    """Return the rendering class of a single diff line."""
    if line.startswith(("+++", "---")):
        return LineKind.HEADER
    if line.startswith("+"):
        return LineKind.ADDED
    if line.startswith("-"):
        return LineKind.REMOVED
    if line.startswith("@@"):
        return LineKind.HUNK_HEADER
    if line.startswith(METADATA_PREFIXES):
        return LineKind.FILE_METADATA
    return LineKind.CONTEXT


def _unquote(value: str) -> str:
    return value.strip().strip("\"'")


def _strip_side(value: str, prefixes: tuple[str, ...] = ("a/", "b/")) -> str:
    value = _unquote(value)
    for prefix in prefixes:
        if value.startswith(prefix):
            return value[len(prefix):]
    return value


def _path_from_boundary(line: str) -> str | None:
    """Resolve the file path named on a ``diff --git``-style boundary line."""
    match = _B_PATH.search(line)
    if match:
        return match.group(1)
    tokens = line.split()[2:]
    for index, token in enumerate(tokens[:-1]):
        if _unquote(token).startswith("a/"):
            return _strip_side(tokens[index + 1], ("b/",))
    if tokens:
        return _strip_side(tokens[-1]) or None
    return None


def _path_from_header(line: str, prefix: str) -> str:
    """Extract the path of a ``---``/``+++`` line, dropping any timestamp."""
    value = line[3:].split("\t", 1)[0]
    return _strip_side(value, (prefix,))


def _is_null(path: str | None) -> bool:
    return path in _NULL_PATHS


def _classify(lines: list[str]) -> tuple[DiffLine, ...]:
    return tuple(DiffLine(text=line, kind=classify_diff_line(line)) for line in lines)


class _FileSection:
    """Accumulates one file's lines and the metadata they carry."""

    def __init__(self, path: str | None) -> None:
        self.path = path
        self.lines: list[str] = []
        self.is_new = False
        self.is_deleted = False
        self.rename_from: str | None = None
        self.rename_to: str | None = None
        self.old_path: str | None = None
        self.new_path: str | None = None
        self.hunks = 0

    def feed(self, line: str) -> None:
        self.lines.append(line)
        if line.startswith("@@"):
            self.hunks += 1
        elif self.hunks:
            # Inside a hunk only the @@ markers carry structure.
            return
        elif line.startswith("new file mode"):
            self.is_new = True
        elif line.startswith("deleted file mode"):
            self.is_deleted = True
        elif line.startswith("rename from"):
            self.rename_from = line[len("rename from"):].strip()
        elif line.startswith("rename to"):
            self.rename_to = line[len("rename to"):].strip()
        elif line.startswith("--- "):
            self.old_path = _path_from_header(line, "a/")
        elif line.startswith("+++ "):
            self.new_path = _path_from_header(line, "b/")
            if self.new_path and not _is_null(self.new_path):
                self.path = self.new_path

    def kind(self) -> ChangeKind:
        if self.is_new:
            return ChangeKind.ADDED
        if self.is_deleted:
            return ChangeKind.DELETED
        if self.rename_from and self.rename_to:
            return ChangeKind.RENAMED
        if _is_null(self.old_path) and self.new_path and not _is_null(self.new_path):
            return ChangeKind.ADDED
        if _is_null(self.new_path) and self.old_path and not _is_null(self.old_path):
            return ChangeKind.DELETED
        return ChangeKind.MODIFIED

    def build(self) -> FileDiffRecord:
        path = self.path
        if not path:
            for candidate in (self.new_path, self.old_path):
                if candidate and not _is_null(candidate):
                    path = candidate
                    break
        kind = self.kind()
        renamed = kind == ChangeKind.RENAMED
        return FileDiffRecord(
            path=path or UNKNOWN_PATH,
            kind=kind,
            rename_from=self.rename_from if renamed else None,
            rename_to=self.rename_to if renamed else None,
            old_path=self.old_path,
            new_path=self.new_path,
            hunks=self.hunks,
            lines=_classify(self.lines),
        )


def _fallback(lines: list[str]) -> list[FileDiffRecord]:
    """Group a diff that has no ``diff --git`` boundaries as coarsely as needed."""
    for index, line in enumerate(lines):
        if not line.startswith(("--- ", "+++ ")):
            continue
        section = _FileSection(None)
        for section_line in lines[index:]:
            section.feed(section_line)
        return [section.build()]
    return [
        FileDiffRecord(
            path=WHOLE_INPUT_PATH,
            hunks=sum(1 for line in lines if line.startswith("@@")),
            lines=_classify(lines),
        )
    ]


def parse_git_diff(raw: str) -> list[FileDiffRecord]:
    """Parse a unified diff into per-file records in input order.

    Never raises on malformed text; input without recognizable structure
    degrades to a single record covering it.

    Args:
        raw: Unified diff text from a file diff or a multi-file commit diff.
    """
    if not raw or not raw.strip():
        return []
    lines = _LINE_SPLIT.split(raw)
    if lines[-1] == "":
        lines.pop()
    records: list[FileDiffRecord] = []
    preamble: list[str] = []
    current: _FileSection | None = None
    for line in lines:
        if line.startswith(BOUNDARY_PREFIXES):
            # Start a new file section when a diff header appears.
            if current is not None:
                records.append(current.build())
            current = _FileSection(_path_from_boundary(line))
            current.lines.append(line)
            continue
        if current is None:
            preamble.append(line)
            continue
        current.feed(line)

    if current is not None:
        records.append(current.build())

    if not records:
        return _fallback(lines)
    if any(line.strip() for line in preamble):
        records.insert(0, FileDiffRecord(path=PREAMBLE_PATH, lines=_classify(preamble)))
    return records
