"""Note body parsing: wiki-link references and hash tags."""

import re

# [[anything]], shortest match, never spanning a closing "]]"
WIKILINK_PATTERN = re.compile(r"\[\[(.*?)\]\]")

# "#" followed by one or more word characters
TAG_PATTERN = re.compile(r"#(\w+)")


def extract_links(content: str) -> list[str]:
    """Extract all wiki-link references from content, left to right.

    Captured text is returned verbatim: duplicates, casing and
    surrounding whitespace are preserved. An unterminated ``[[`` yields
    nothing.
    """
    return WIKILINK_PATTERN.findall(content or "")


def extract_tags(content: str) -> list[str]:
    """Extract hash tags (without the ``#``) in order of appearance."""
    return TAG_PATTERN.findall(content or "")


def unique_tags(content: str) -> list[str]:
    """Tags deduplicated while preserving first-seen order."""
    seen = set()
    result = []
    for tag in extract_tags(content):
        if tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result
