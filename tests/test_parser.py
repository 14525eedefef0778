from notegraph.vault.parser import extract_links, extract_tags, unique_tags


def test_extract_links_in_order_with_duplicates() -> None:
    assert extract_links("See [[Alpha]] then [[beta ]] and [[Alpha]] again") == ["Alpha", "beta ", "Alpha"]


def test_extract_links_adjacent_references() -> None:
    assert extract_links("[[A]][[B]]") == ["A", "B"]


def test_extract_links_across_lines() -> None:
    assert extract_links("[[A]] x\n[[B]] y [[C]]") == ["A", "B", "C"]


def test_unterminated_reference_is_ignored() -> None:
    assert extract_links("[[A]] and [[B") == ["A"]
    assert extract_links("[[never closed") == []


def test_reference_does_not_span_newline() -> None:
    assert extract_links("[[first\nsecond]]") == []


def test_empty_and_missing_content() -> None:
    assert extract_links("") == []
    assert extract_tags("") == []


def test_extract_tags() -> None:
    assert extract_tags("#one and #two_2, then # alone and #") == ["one", "two_2"]


def test_tag_inside_word_still_matches() -> None:
    assert extract_tags("issue#42") == ["42"]


def test_unique_tags_preserves_first_seen_order() -> None:
    assert unique_tags("#b #a #b #c #a") == ["b", "a", "c"]
