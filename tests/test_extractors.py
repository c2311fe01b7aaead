from datetime import datetime
from pathlib import Path

import pytest

from inkwell.errors import MetadataError
from inkwell.extractors import (
    CompositeMetadataExtractor,
    DateExtractor,
    ExcerptExtractor,
    PermalinkExtractor,
    SlugExtractor,
    TagExtractor,
    TitleExtractor,
    extract_frontmatter,
)

POST = Path("content/_posts/2015-01-06-swift-enums.md")


def test_extract_frontmatter_splits_header_and_body():
    text = "---\ntitle: Swift Enums\ntags: [swift]\n---\n# Heading\n\nBody\n"
    frontmatter, body = extract_frontmatter(text)
    assert frontmatter == {"title": "Swift Enums", "tags": ["swift"]}
    assert body == "# Heading\n\nBody\n"


def test_extract_frontmatter_without_header():
    frontmatter, body = extract_frontmatter("Just text\n")
    assert frontmatter == {}
    assert body == "Just text\n"

    frontmatter, body = extract_frontmatter("---\n---\nEmpty header\n")
    assert frontmatter == {}
    assert body == "Empty header\n"


def test_extract_frontmatter_rejects_bad_yaml():
    with pytest.raises(MetadataError) as excinfo:
        extract_frontmatter("---\ntitle: [unclosed\n---\nbody", "post.md")
    assert excinfo.value.source == Path("post.md")
    assert "invalid front matter" in str(excinfo.value)

    with pytest.raises(MetadataError, match="mapping"):
        extract_frontmatter("---\n- just\n- a list\n---\nbody", "post.md")


def test_title_extractor_fallbacks():
    extractor = TitleExtractor()
    assert extractor.extract({"title": "Equality"}, "", POST) == {"title": "Equality"}
    assert extractor.extract({}, "intro\n# From Heading\n", POST) == {"title": "From Heading"}
    assert extractor.extract({}, "no heading", POST) == {"title": "Swift Enums"}
    with pytest.raises(MetadataError):
        extractor.extract({"title": ["a", "b"]}, "", POST)


def test_title_extractor_keeps_hashes_and_skips_code():
    extractor = TitleExtractor()
    assert extractor.extract({}, "# #1 tip\n", POST) == {"title": "#1 tip"}
    body = "```bash\n# install it\n```\n\n# Real Title\n"
    assert extractor.extract({}, body, POST) == {"title": "Real Title"}
    assert extractor.extract({}, "~~~\n# comment\n~~~\n", POST) == {"title": "Swift Enums"}


def test_date_extractor():
    extractor = DateExtractor()
    assert extractor.extract({"date": "2015-09-29"}, "", POST)["date"] == datetime(2015, 9, 29)
    # Filename prefix when front matter is silent
    assert extractor.extract({}, "", POST)["date"] == datetime(2015, 1, 6)
    assert extractor.extract({}, "", Path("about.md"))["date"] is None
    with pytest.raises(MetadataError, match="malformed 'date'"):
        extractor.extract({"date": "next tuesday"}, "", POST)


def test_tag_extractor_merges_categories():
    extractor = TagExtractor()
    result = extractor.extract({"tags": ["swift", "enums"], "categories": "swift, language"}, "", POST)
    assert result["tags"] == frozenset({"swift", "enums", "language"})
    assert extractor.extract({}, "", POST)["tags"] == frozenset()
    with pytest.raises(MetadataError, match="malformed 'tags'"):
        extractor.extract({"tags": {"swift": 1}}, "", POST)


def test_permalink_and_slug_extractors():
    assert PermalinkExtractor().extract({"permalink": "about"}, "", POST) == {"permalink": "/about/"}
    assert PermalinkExtractor().extract({}, "", POST) == {}
    with pytest.raises(MetadataError):
        PermalinkExtractor().extract({"permalink": 42}, "", POST)

    assert SlugExtractor().extract({"slug": "/enums/"}, "", POST) == {"slug": "enums"}
    assert SlugExtractor().extract({}, "", POST) == {}
    with pytest.raises(MetadataError):
        SlugExtractor().extract({"slug": "/"}, "", POST)


def test_excerpt_extractor_skips_non_prose():
    body = "# Title\n\n![img](a.png)\n\n```swift\nenum A {}\n```\n\nFirst real\nparagraph.\n\nSecond."
    assert ExcerptExtractor().extract({}, body, POST) == {"excerpt": "First real paragraph."}
    assert ExcerptExtractor().extract({"excerpt": "Given"}, body, POST) == {"excerpt": "Given"}


def test_composite_extractor_merges_and_extends():
    class Reading:
        def extract(self, frontmatter, body, path):
            return {"minutes": len(body.split()) // 200 + 1}

    composite = CompositeMetadataExtractor()
    composite.add_extractor(Reading())
    result = composite.extract({"title": "T", "permalink": "/t/"}, "word " * 10, POST)
    assert result["title"] == "T"
    assert result["permalink"] == "/t/"
    assert result["date"] == datetime(2015, 1, 6)
    assert result["minutes"] == 1

    only_title = CompositeMetadataExtractor([TitleExtractor()])
    assert only_title.extract({}, "", POST) == {"title": "Swift Enums"}
