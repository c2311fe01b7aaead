from datetime import datetime
from pathlib import Path

import pytest

from inkwell.build import DEFAULT_CONFIG, BuildResult, build_site, load_config
from inkwell.errors import BuildError, CollisionError, ConfigError, MetadataError


def create_project(tmp_path: Path) -> Path:
    project = tmp_path / "blog"
    posts = project / "content" / "_posts"
    posts.mkdir(parents=True)
    (posts / "2015-01-06-swift-enums.md").write_text(
        "---\ntitle: Enums\ntags: [swift]\n---\nEnums.\n", encoding="utf-8"
    )
    (posts / "2015-09-29-sequences.md").write_text(
        "---\ntitle: Sequences\ntags: [swift, sequences]\n---\nSequences.\n", encoding="utf-8"
    )
    (posts / "2014-12-24-objc-protocols.md").write_text(
        "---\ntitle: Protocols\ntags: [objc]\n---\nProtocols.\n", encoding="utf-8"
    )
    (project / "content" / "about.md").write_text(
        "---\ntitle: About\npermalink: /about/\n---\nAbout me.\n", encoding="utf-8"
    )
    (project / "content" / "projects.md").write_text(
        "---\ntitle: Projects\npermalink: /projects/\n---\nThings.\n", encoding="utf-8"
    )
    return project


def test_load_config_defaults_and_overrides(tmp_path):
    assert load_config(tmp_path) == DEFAULT_CONFIG
    (tmp_path / "inkwell.yaml").write_text("posts_dir: posts\nworkers: '3'\n", encoding="utf-8")
    config = load_config(tmp_path)
    assert config["posts_dir"] == "posts"
    assert config["workers"] == 3
    assert config["content_dir"] == "content"


def test_load_config_rejects_malformed(tmp_path):
    (tmp_path / "inkwell.yaml").write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
    (tmp_path / "inkwell.yaml").write_text("key: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)
    (tmp_path / "inkwell.yaml").write_text("workers: many\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="workers"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "line", ["content_dir: 5\n", "posts_dir: [a, b]\n", "permalink: ''\n"]
)
def test_load_config_rejects_non_string_paths(tmp_path, line):
    (tmp_path / "inkwell.yaml").write_text(line, encoding="utf-8")
    key = line.split(":")[0]
    with pytest.raises(ConfigError, match=key):
        load_config(tmp_path)


def test_build_site_indexes_everything(tmp_path):
    project = create_project(tmp_path)
    result = build_site(project)
    assert isinstance(result, BuildResult)
    documents = result.documents
    assert result.content_dir == project / "content"
    assert [d.slug for d in documents.posts()] == ["sequences", "swift-enums", "objc-protocols"]
    assert [d.date for d in documents.posts()] == [
        datetime(2015, 9, 29),
        datetime(2015, 1, 6),
        datetime(2014, 12, 24),
    ]
    assert {d.slug for d in documents.by_tag("swift")} == {"sequences", "swift-enums"}
    assert documents.by_slug("about").permalink == "/about/"


def test_build_site_with_workers(tmp_path):
    project = create_project(tmp_path)
    sequential = build_site(project).documents
    threaded = build_site(project, workers=4).documents
    assert list(threaded) == list(sequential)


def test_build_site_reports_collisions(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "about-me.md").write_text(
        "---\ntitle: About Me\npermalink: /about/\n---\n", encoding="utf-8"
    )
    with pytest.raises(CollisionError) as excinfo:
        build_site(project)
    names = {p.name for p in excinfo.value.sources}
    assert names == {"about.md", "about-me.md"}


def test_build_site_reports_posts_sharing_a_permalink(tmp_path):
    project = create_project(tmp_path)
    posts = project / "content" / "_posts"
    (posts / "2015-01-06-a.md").write_text(
        "---\ntitle: A\npermalink: /about/\n---\n", encoding="utf-8"
    )
    (posts / "2015-01-07-b.md").write_text(
        "---\ntitle: B\npermalink: /about/\n---\n", encoding="utf-8"
    )
    with pytest.raises(CollisionError) as excinfo:
        build_site(project)
    assert excinfo.value.field == "permalink"
    assert excinfo.value.identifier == "/about/"
    names = {p.name for p in excinfo.value.sources}
    assert names == {"2015-01-06-a.md", "2015-01-07-b.md"}


def test_build_site_reports_post_claiming_a_page_permalink(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "_posts" / "2015-01-06-elsewhere.md").write_text(
        "---\ntitle: Elsewhere\npermalink: /about/\n---\n", encoding="utf-8"
    )
    with pytest.raises(CollisionError) as excinfo:
        build_site(project)
    assert excinfo.value.field == "permalink"
    names = {p.name for p in excinfo.value.sources}
    assert names == {"about.md", "2015-01-06-elsewhere.md"}


def test_build_site_dates_drafts_from_filename(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "_posts" / "_2015-01-06-draft.md").write_text(
        "---\ntitle: Draft\n---\nNot yet.\n", encoding="utf-8"
    )
    assert build_site(project).documents.by_slug("draft") is None
    draft = build_site(project, include_drafts=True).documents.by_slug("draft")
    assert draft is not None
    assert draft.draft
    assert draft.date == datetime(2015, 1, 6)
    assert draft.permalink == "/2015/01/06/draft/"



def test_build_site_reports_missing_post_date(tmp_path):
    project = create_project(tmp_path)
    (project / "content" / "_posts" / "undated.md").write_text(
        "---\ntitle: Undated\n---\n", encoding="utf-8"
    )
    with pytest.raises(MetadataError) as excinfo:
        build_site(project)
    assert excinfo.value.source.name == "undated.md"


def test_build_site_missing_content_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        build_site(tmp_path)


def test_build_site_runs_renderers(tmp_path):
    project = create_project(tmp_path)
    seen = {}

    class TitleRenderer:
        def render(self, site):
            seen["titles"] = [d.title for d in site.list_all()]
            seen["swift"] = len(site.by_tag("swift"))
            seen["about"] = site.by_slug("about").title

    build_site(project, renderers=[TitleRenderer()])
    assert seen["titles"] == ["Sequences", "Enums", "Protocols", "About", "Projects"]
    assert seen["swift"] == 2
    assert seen["about"] == "About"


def test_build_site_wraps_renderer_failures(tmp_path):
    project = create_project(tmp_path)

    class Broken:
        def render(self, site):
            raise RuntimeError("disk full")

    with pytest.raises(BuildError) as excinfo:
        build_site(project, renderers=[Broken()])
    assert "Broken" in excinfo.value.message
    assert "disk full" in excinfo.value.message
    assert isinstance(excinfo.value.original_error, RuntimeError)
