"""
Completion text -> ExplanationSections.

A small state machine over the four section markers:

- A marker is NAME followed by a colon (e.g. "SUMMARY:"), anywhere in a line.
  Markdown emphasis around the name ("**SUMMARY**:") is tolerated.
  Several markers on one line split it into segments.
- A marker closes the open section and opens its own, seeded with the text
  that follows it on the same line.
- Text before the first marker of a line continues the open section, unless
  it is only list/markdown decoration ("2.", "**", "-"), which is dropped.
- Text with no open section is discarded.
- Markers may come in any order. A repeated marker appends to the text its
  section already holds.
- End of input closes the open section. Sections never seen stay "".
"""

import re
from typing import Dict, List, Optional

from pharmaguard.schemas.explanation import SECTION_KEYS, ExplanationSections

MARKERS: Dict[str, str] = {
    "SUMMARY": "summary",
    "MECHANISM": "mechanism",
    "RISK_RATIONALE": "risk_rationale",
    "PATIENT_FRIENDLY": "patient_friendly",
}

_MARKER_RE = re.compile(r"\b(SUMMARY|MECHANISM|RISK_RATIONALE|PATIENT_FRIENDLY)\**\s*:")
_DECORATION_RE = re.compile(r"^\s*(\d+[.)]|[-*#]+)?\s*\**\s*$")


class SectionParser:
    """Incremental parser; feed lines, then call finish()."""

    def __init__(self):
        self._fragments: Dict[str, List[str]] = {key: [] for key in SECTION_KEYS}
        self._current: Optional[str] = None

    @property
    def current_section(self) -> Optional[str]:
        return self._current

    def feed_line(self, line: str) -> None:
        text = line.strip()
        if not text:
            return

        cursor = 0
        for match in _MARKER_RE.finditer(text):
            segment = text[cursor:match.start()]
            if cursor == 0:
                if not _DECORATION_RE.match(segment):
                    self._append(segment)
            else:
                self._append(_strip_emphasis(segment))
            self._current = MARKERS[match.group(1)]
            cursor = match.end()

        rest = text[cursor:]
        self._append(_strip_emphasis(rest) if cursor else rest)

    def finish(self) -> ExplanationSections:
        self._current = None
        return ExplanationSections(**{
            key: " ".join(parts).strip() for key, parts in self._fragments.items()
        })

    def _append(self, text: str) -> None:
        text = text.strip()
        if text and self._current is not None:
            self._fragments[self._current].append(text)


def parse_sections(content: str) -> ExplanationSections:
    """Parse a free-text completion into the four explanation sections."""
    parser = SectionParser()
    for line in content.splitlines():
        parser.feed_line(line)
    return parser.finish()


def _strip_emphasis(segment: str) -> str:
    return segment.strip().strip("*").strip()
