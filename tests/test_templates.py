from datetime import datetime

import pytest

from plume.posts import Post, PostMeta
from plume.templates import (
    format_date,
    load_template,
    render_index_template,
    render_template,
)


def make_post(slug="test", title="Test Title", when=datetime(2026, 1, 17), draft=False, html="<p>Hi</p>"):
    return Post(
        slug=slug,
        meta=PostMeta(title=title, date=when, draft=draft),
        content="Hi",
        html=html,
    )


def test_format_date_is_long_english():
    assert format_date(datetime(2026, 1, 17)) == "January 17, 2026"
    assert format_date(datetime(2024, 12, 5, 23, 59)) == "December 5, 2024"
    assert format_date(None) == ""


def test_render_template_replaces_every_occurrence():
    template = "<title>{{title}}</title><h1>{{title}}</h1>"
    rendered = render_template(template, make_post())
    assert rendered == "<title>Test Title</title><h1>Test Title</h1>"
    assert "{{title}}" not in rendered


def test_render_template_fills_date_and_content():
    template = "<time>{{date}}</time>{{content}}<footer>{{date}}</footer>"
    rendered = render_template(template, make_post(html="<p>Body</p>"))
    assert rendered == (
        "<time>January 17, 2026</time><p>Body</p><footer>January 17, 2026</footer>"
    )


def test_render_template_missing_fields_render_empty():
    post = make_post(title=None, when=None)
    rendered = render_template("[{{title}}|{{date}}]", post)
    assert rendered == "[|]"


def test_render_template_does_not_expand_placeholders_inside_values():
    post = make_post(title="Using {{content}} and {{date}}", html="<p>{{title}}</p>")
    rendered = render_template("<h1>{{title}}</h1>{{content}}", post)
    assert rendered == "<h1>Using {{content}} and {{date}}</h1><p>{{title}}</p>"


def test_render_template_leaves_unknown_placeholders():
    rendered = render_template("{{title}} {{author}} {{posts}}", make_post())
    assert rendered == "Test Title {{author}} {{posts}}"


def test_render_index_template_lists_posts_in_order():
    posts = [
        make_post(slug="2024-02-01-new", title="New", when=datetime(2024, 2, 1)),
        make_post(slug="2024-01-01-old", title="Old", when=datetime(2024, 1, 1)),
    ]
    rendered = render_index_template("<main>{{posts}}</main>{{title}}", posts)
    assert '<a href="2024-02-01-new.html">New</a>' in rendered
    assert '<time datetime="2024-02-01">February 1, 2024</time>' in rendered
    assert rendered.index("New") < rendered.index("Old")
    assert rendered.count("<article>") == 2
    # only {{posts}} is recognised in the index template
    assert rendered.endswith("{{title}}")


def test_render_index_template_empty():
    assert render_index_template("<main>{{posts}}</main>", []) == "<main></main>"


def test_load_template(tmp_path):
    (tmp_path / "post.html").write_text("<h1>{{title}}</h1>", encoding="utf-8")
    assert load_template(tmp_path, "post") == "<h1>{{title}}</h1>"
    with pytest.raises(FileNotFoundError):
        load_template(tmp_path, "index")
