from theme_gallery.domain.frontmatter import parse_frontmatter


DOCUMENT = """---
layout: post
title: "Night Owl"
author: 'jane'
homepage: https://github.com/acme/theme-x
thumbnail: /night-owl.png
---

# Night Owl

Some body text: with a colon.
"""


def test_parses_flat_pairs_and_strips_quotes():
    data = parse_frontmatter(DOCUMENT)
    assert data == {
        "layout": "post",
        "title": "Night Owl",
        "author": "jane",
        "homepage": "https://github.com/acme/theme-x",
        "thumbnail": "/night-owl.png",
    }


def test_splits_at_first_colon_only():
    data = parse_frontmatter("---\nhomepage: https://example.com:8080/x\n---\n")
    assert data["homepage"] == "https://example.com:8080/x"


def test_ignores_lines_without_colon_and_body_after_block():
    data = parse_frontmatter("---\njust words\ntitle: A\n---\nauthor: not-front-matter\n")
    assert data == {"title": "A"}


def test_accepts_crlf_line_endings():
    data = parse_frontmatter("---\r\ntitle: Windows\r\n---\r\nbody")
    assert data == {"title": "Windows"}


def test_mismatched_quotes_are_kept():
    data = parse_frontmatter("---\ntitle: \"half'\n---\n")
    assert data["title"] == "\"half'"


def test_missing_opening_delimiter_returns_empty_mapping():
    assert parse_frontmatter("title: no block\n---\n") == {}
    assert parse_frontmatter("") == {}
    assert parse_frontmatter("# Heading only") == {}


def test_unterminated_block_reads_to_end():
    assert parse_frontmatter("---\ntitle: Open\nauthor: bob") == {"title": "Open", "author": "bob"}


def test_reparsing_serialized_mapping_is_stable():
    data = parse_frontmatter(DOCUMENT)
    serialized = "---\n" + "\n".join(f"{k}: {v}" for k, v in data.items()) + "\n---\n"
    assert parse_frontmatter(serialized) == data


def test_leading_byte_order_mark_is_ignored():
    assert parse_frontmatter("\ufeff---\ntitle: BOM\n---\n") == {"title": "BOM"}


def test_only_newlines_split_lines():
    data = parse_frontmatter("---\ndescription: form\x0cfeed and line\u2028sep\n---\n")
    assert data == {"description": "form\x0cfeed and line\u2028sep"}
