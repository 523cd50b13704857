import pytest

from linkmanager.model import LinkType
from linkmanager.services.link_removal_service import LinkRemovalService

HTML = '<p>See <a href="https://other.com">Other</a> and <a href="/local">Local</a>.</p>'


@pytest.fixture
def remover() -> LinkRemovalService:
    return LinkRemovalService("example.com")


def test_remove_external(remover):
    result = remover.remove_links(HTML, LinkType.EXTERNAL)
    assert result.content == '<p>See Other and <a href="/local">Local</a>.</p>'
    assert result.removed_count == 1
    assert result.changed


def test_remove_internal(remover):
    result = remover.remove_links(HTML, "internal")
    assert result.content == '<p>See <a href="https://other.com">Other</a> and Local.</p>'
    assert result.removed_count == 1


def test_remove_all(remover):
    result = remover.remove_links(HTML, LinkType.ALL)
    assert result.content == "<p>See Other and Local.</p>"
    assert result.removed_count == 2


def test_nested_markup_is_kept(remover):
    result = remover.remove_links('<a href="https://other.com"><strong>Bold</strong> text</a>', "all")
    assert result.content == "<strong>Bold</strong> text"


@pytest.mark.parametrize("href", ["mailto:a@b.com", "#top", "", "javascript:void(0)"])
def test_skipped_links_are_never_removed(remover, href):
    html = f'<a href="{href}">x</a>'
    result = remover.remove_links(html, "all")
    assert result.content == html
    assert result.removed_count == 0
    assert not result.changed


def test_nothing_to_remove_returns_original(remover):
    html = '<p>Only <a href="/local">internal</a></p>'
    result = remover.remove_links(html, LinkType.EXTERNAL)
    assert result.content == html
    assert result.removed_count == 0


def test_empty_content(remover):
    assert remover.remove_links("", "all").content == ""


def test_unknown_link_type_raises(remover):
    with pytest.raises(ValueError):
        remover.remove_links(HTML, "sponsored")


def test_parser_failure_returns_input(remover, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr("linkmanager.utils.html_fragment.BeautifulSoup", broken)
    result = remover.remove_links(HTML, "all")
    assert result.content == HTML
    assert result.removed_count == 0


def test_remaining_attributes_keep_their_order(remover):
    html = '<a href="/local" class="c" data-id="1">In</a><a href="https://other.com">Out</a>'
    result = remover.remove_links(html, "external")
    assert result.content == '<a href="/local" class="c" data-id="1">In</a>Out'
