"""Unified diff parser - extract the files touched by a diff.

Parses the `.diff` output of a pull request (git-style `diff --git`
sections) as well as plain `diff -u` output (sections introduced by
`---`/`+++` header pairs). Each file section becomes one `DiffPatch`.

Path conventions:
  - modified / added files report the new (`+++ b/`) path
  - deleted files report the old (`--- a/`) path
  - renames report the new path, with the old one kept in `old_path`
  - sections without `---`/`+++` headers (pure renames, mode changes,
    binary files) fall back to `rename to`, then the `diff --git` header

Parsing is forgiving: lines that are not diff syntax are skipped and a
section whose path cannot be recovered is dropped. Nothing is raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DEV_NULL = "/dev/null"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_LAZY_SPLIT = re.compile(r"^(a/.+?) (b/.+)$")


@dataclass
class DiffHunk:
    """A single hunk from a unified diff."""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[str] = field(default_factory=list)


@dataclass
class DiffPatch:
    """Changes to a single file."""
    path: str
    status: str = "modified"  # 'added', 'modified', 'deleted', 'renamed', 'copied'
    old_path: str | None = None  # For renames and copies
    is_binary: bool = False
    hunks: list[DiffHunk] = field(default_factory=list)
    added_lines: int = 0
    deleted_lines: int = 0

    @property
    def changed_line_ranges(self) -> list[tuple[int, int]]:
        """Get ranges of changed lines in the new file."""
        return [(h.new_start, h.new_start + h.new_count) for h in self.hunks]


@dataclass
class _Section:
    """Header state collected while walking one file section."""
    is_git: bool = False
    header_old: str | None = None
    header_new: str | None = None
    minus_path: str | None = None
    plus_path: str | None = None
    saw_plus: bool = False
    new_file: bool = False
    deleted_file: bool = False
    rename_from: str | None = None
    rename_to: str | None = None
    copy_from: str | None = None
    copy_to: str | None = None
    is_binary: bool = False
    hunks: list[DiffHunk] = field(default_factory=list)
    added_lines: int = 0
    deleted_lines: int = 0

    def to_patch(self) -> DiffPatch | None:
        minus = self._strip_prefix(self.minus_path, "a/")
        plus = self._strip_prefix(self.plus_path, "b/")

        deleted = self.deleted_file or plus == DEV_NULL
        added = self.new_file or minus == DEV_NULL
        if plus == DEV_NULL:
            plus = None
        if minus == DEV_NULL:
            minus = None

        if deleted:
            path = minus or self.header_old or self.header_new
            status = "deleted"
            old_path = None
        else:
            path = plus or self.rename_to or self.copy_to or self.header_new
            old_path = self.rename_from or self.copy_from
            if self.rename_to is not None:
                status = "renamed"
            elif self.copy_to is not None:
                status = "copied"
            elif added:
                status = "added"
            else:
                status = "modified"
            if not path and not self.is_git:
                path = minus

        if not path:
            return None

        return DiffPatch(
            path=path,
            status=status,
            old_path=old_path,
            is_binary=self.is_binary,
            hunks=self.hunks,
            added_lines=self.added_lines,
            deleted_lines=self.deleted_lines,
        )

    def _strip_prefix(self, value: str | None, prefix: str) -> str | None:
        if value is None or value == DEV_NULL:
            return value
        if self.is_git or self._plain_has_prefixes():
            if value.startswith(prefix):
                return value[len(prefix):]
        return value

    def _plain_has_prefixes(self) -> bool:
        # Plain diffs only carry git's a/ b/ convention when both sides agree.
        old_ok = self.minus_path in (None, DEV_NULL) or self.minus_path.startswith("a/")
        new_ok = self.plus_path in (None, DEV_NULL) or self.plus_path.startswith("b/")
        either = any(
            p not in (None, DEV_NULL) for p in (self.minus_path, self.plus_path)
        )
        return old_ok and new_ok and either


_C_ESCAPE = re.compile(rb'\\(?:([0-7]{1,3})|(.))', re.DOTALL)
_C_ESCAPE_CHARS = {
    b"a": b"\a", b"b": b"\b", b"t": b"\t", b"n": b"\n",
    b"v": b"\v", b"f": b"\f", b"r": b"\r",
}


def _unquote(path: str) -> str:
    """Undo git's C-style quoting (`"b/\\303\\244.txt"` -> `b/ä.txt`)."""
    if not (len(path) >= 2 and path.startswith('"') and path.endswith('"')):
        return path

    def replace(match: re.Match) -> bytes:
        octal, char = match.groups()
        if octal is not None:
            return bytes([int(octal, 8) & 0xFF])
        return _C_ESCAPE_CHARS.get(char, char)

    raw = _C_ESCAPE.sub(replace, path[1:-1].encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def _closing_quote(text: str) -> int:
    """Index of the quote closing the string opened at text[0], or -1."""
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i
        i += 1
    return -1


def _split_git_header(rest: str) -> tuple[str, str] | None:
    """Split the `a/<old> b/<new>` part of a `diff --git` line.

    Unquoted paths may contain " b/", so the split point is ambiguous. When
    both halves name the same file (the only case where git omits `---`/`+++`
    without a rename header) the mirrored split is taken.
    """
    if rest.startswith('"'):
        end = _closing_quote(rest)
        if end == -1 or rest[end + 1:end + 2] != " ":
            return None
        old, new = rest[:end + 1], rest[end + 2:]
    elif rest.endswith('"') and ' "' in rest:
        cut = rest.rindex(' "')
        old, new = rest[:cut], rest[cut + 1:]
    else:
        half, odd = divmod(len(rest) - 1, 2)
        if not odd and rest[half] == " " and rest[2:half] == rest[half + 3:]:
            old, new = rest[:half], rest[half + 1:]
        else:
            match = _LAZY_SPLIT.match(rest)
            if not match:
                return None
            old, new = match.groups()

    old, new = _unquote(old), _unquote(new)
    if not (old.startswith("a/") and new.startswith("b/")):
        return None
    return old[2:], new[2:]


def _file_header_path(line: str) -> str:
    """Path from a `--- ` / `+++ ` line, without a trailing timestamp."""
    value = line[4:]
    if "\t" in value:
        value = value.split("\t", 1)[0]
    return _unquote(value.rstrip())


def parse_diff(diff_text: str) -> list[DiffPatch]:
    """Parse unified diff text into `DiffPatch` objects, in diff order."""
    patches: list[DiffPatch] = []
    current: _Section | None = None
    current_hunk: DiffHunk | None = None
    old_left = new_left = 0

    def flush() -> None:
        if current is not None:
            patch = current.to_patch()
            if patch is not None:
                patches.append(patch)

    for line in diff_text.splitlines():
        # Hunk body, bounded by the counts from its @@ header
        if current_hunk is not None and (old_left > 0 or new_left > 0):
            marker = line[:1]
            if marker in (" ", ""):
                old_left -= 1
                new_left -= 1
            elif marker == "-":
                old_left -= 1
                current.deleted_lines += 1
            elif marker == "+":
                new_left -= 1
                current.added_lines += 1
            elif marker == "\\":
                pass  # "\ No newline at end of file"
            else:
                old_left = new_left = 0
                current_hunk = None
            if current_hunk is not None:
                current_hunk.lines.append(line)
                continue

        if line.startswith("diff "):
            flush()
            current_hunk = None
            if line.startswith("diff --git "):
                paths = _split_git_header(line[len("diff --git "):])
                current = _Section(is_git=True)
                if paths is not None:
                    current.header_old, current.header_new = paths
            else:
                current = None
            continue

        if line.startswith("--- "):
            if current is None or current.saw_plus or current.hunks:
                flush()
                current = _Section()
            current.minus_path = _file_header_path(line)
            current_hunk = None
            continue

        if line.startswith("+++ "):
            if current is not None and not current.saw_plus:
                current.plus_path = _file_header_path(line)
                current.saw_plus = True
            continue

        if line.startswith("@@"):
            match = _HUNK_HEADER.match(line)
            if match and current is not None:
                current_hunk = DiffHunk(
                    old_start=int(match.group(1)),
                    old_count=int(match.group(2) or "1"),
                    new_start=int(match.group(3)),
                    new_count=int(match.group(4) or "1"),
                )
                current.hunks.append(current_hunk)
                old_left = current_hunk.old_count
                new_left = current_hunk.new_count
            continue

        if current is None or not current.is_git:
            continue

        # git extended header lines
        if line.startswith("new file mode"):
            current.new_file = True
        elif line.startswith("deleted file mode"):
            current.deleted_file = True
        elif line.startswith("rename from "):
            current.rename_from = _unquote(line[len("rename from "):])
        elif line.startswith("rename to "):
            current.rename_to = _unquote(line[len("rename to "):])
        elif line.startswith("copy from "):
            current.copy_from = _unquote(line[len("copy from "):])
        elif line.startswith("copy to "):
            current.copy_to = _unquote(line[len("copy to "):])
        elif line.startswith("Binary files ") or line == "GIT binary patch":
            current.is_binary = True

    flush()
    return patches


class UnifiedDiffParser:
    """Object wrapper around `parse_diff` for callers that inject a parser."""

    def parse(self, diff_text: str) -> list[DiffPatch]:
        return parse_diff(diff_text)

    def changed_paths(self, diff_text: str) -> list[str]:
        return [patch.path for patch in parse_diff(diff_text)]
