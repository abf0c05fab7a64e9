from io import BytesIO
from pathlib import Path

import httpx
import pytest
from lxml import etree
from pytest_httpx import IteratorStream

from sprig import Document, ParserOptions, parse_tree
from sprig.exceptions import FailedDocumentLoading, InvalidData
from sprig.nodes import CommentNode, ProcessingInstructionNode, TagNode

from _sprig.plugins import plugin_manager
from _sprig.plugins.core_loaders import (
    buffer_loader,
    path_loader,
    tag_node_loader,
    text_loader,
)
from _sprig.plugins.lxml_loader import lxml_loader
from _sprig.plugins.web_loader import web_loader

from tests.plugins import sample_loader
from tests.utils import assert_equal_trees, chdir

TEST_FILE = Path(__file__).resolve().parent / "files" / "books.xml"
TEST_CONTENTS = TEST_FILE.read_text()
TEST_FILE_URI = TEST_FILE.as_uri()


def test_loaders_order():
    loaders = plugin_manager.loaders
    assert loaders.index(path_loader) < loaders.index(buffer_loader)
    assert loaders.index(web_loader) < loaders.index(text_loader)
    assert loaders.index(lxml_loader) < loaders.index(text_loader)
    assert loaders.index(sample_loader) < loaders.index(text_loader)
    assert tag_node_loader not in loaders


def test_buffer_loader():
    with TEST_FILE.open("rb") as f:
        document = Document(f)
    assert document.source_url == TEST_FILE_URI
    assert document.root.name == "catalog"

    with chdir(TEST_FILE.parent), Path(TEST_FILE.name).open("rb") as f:
        document = Document(f)
    assert document.source_url == TEST_FILE_URI

    document = Document(BytesIO(b"<root/>"))
    assert document.source_url is None
    assert document.root.name == "root"


def test_buffer_is_read_from_start():
    buffer = BytesIO(b"<root><a/></root>")
    buffer.read()
    assert Document(buffer).root.first_child.name == "a"


def test_path_loader():
    document = Document(TEST_FILE)
    assert document.source_url == TEST_FILE_URI

    with chdir(TEST_FILE.parent):
        document = Document(Path(TEST_FILE.name))
    assert document.source_url == TEST_FILE_URI

    document = Document(TEST_FILE, source_url="https://sprig.example/books.xml")
    assert document.source_url == "https://sprig.example/books.xml"


def test_missing_file():
    with pytest.raises(FailedDocumentLoading) as excinfo:
        Document(TEST_FILE.with_name("missing.xml"))
    assert isinstance(excinfo.value.excuses[path_loader], FileNotFoundError)


def test_tag_node_loader():
    node = TagNode("root")
    assert node.document is None

    document = Document(node)
    assert node.document is document

    document_clone = Document(node)
    assert node is not document_clone.root
    assert node.document is document

    assert str(document) == str(document_clone)


def test_tag_node_loader_excuse():
    root = parse_tree("<root><child/></root>")
    config = type("Config", (), {})()
    assert tag_node_loader(root[0], config) == "Node has a parent node."
    assert isinstance(tag_node_loader("<root/>", config), str)


def test_text_loader():
    document = Document(TEST_CONTENTS)
    assert document.source_url is None
    assert document.root.name == "catalog"

    document = Document(TEST_CONTENTS.encode())
    assert document.query("book").size == 3


def test_text_loader_options():
    document = Document(
        "<root> <!--x--> <?y?></root>",
        parser_options=ParserOptions(
            remove_comments=True, remove_processing_instructions=True
        ),
    )
    assert len(document.root) == 0


@pytest.mark.parametrize("s", ("", "s"))
def test_web_loader(httpx_mock, s):
    httpx_mock.add_response(
        stream=IteratorStream(
            (
                TEST_CONTENTS[i : i + 64].encode()
                for i in range(0, len(TEST_CONTENTS), 64)
            )
        )
    )
    url = f"http{s}://sprig.example/books.xml"
    document = Document(url)
    assert document.root.name == "catalog"
    assert document.source_url == url
    assert document.query("book[3]/author").first.full_text == "Franz Kafka"


def test_web_loader_with_custom_client(httpx_mock):
    httpx_mock.add_response(text="<root/>")
    config = type("Config", (), {"parser_options": ParserOptions()})()
    with httpx.Client() as client:
        result = web_loader("https://sprig.example/", config, client=client)
    assert result[0].name == "root"
    assert config.source_url == "https://sprig.example/"


def test_web_loader_http_error(httpx_mock):
    httpx_mock.add_response(status_code=404)
    with pytest.raises(FailedDocumentLoading) as excinfo:
        Document("https://sprig.example/missing.xml")
    assert isinstance(excinfo.value.excuses[web_loader], httpx.HTTPStatusError)


def test_web_loader_stores_parsed_declaration(httpx_mock):
    httpx_mock.add_response(
        content=b"<?xml version='1.1'?>\n<!--c--><root/>",
        headers={"Content-Type": "application/xml"},
    )
    document = Document("https://sprig.example/doc.xml")
    assert document.version == "1.1"
    assert document.declaration == ProcessingInstructionNode("xml", "version='1.1'")
    assert document.comments == (CommentNode("c"),)
    assert document.config.content_type == "application/xml"


def test_web_loader_uses_response_charset(httpx_mock):
    httpx_mock.add_response(
        content="<root>ä</root>".encode("latin-1"),
        headers={"Content-Type": "application/xml; charset=ISO-8859-1"},
    )
    document = Document("https://sprig.example/latin.xml")
    assert document.root.text_content == "ä"


def test_web_loader_configured_encoding_wins(httpx_mock):
    httpx_mock.add_response(
        content="<root>ä</root>".encode("latin-1"),
        headers={"Content-Type": "application/xml; charset=UTF-8"},
    )
    with pytest.raises(FailedDocumentLoading) as excinfo:
        Document("https://sprig.example/mislabeled.xml")
    assert isinstance(excinfo.value.excuses[web_loader], InvalidData)

    httpx_mock.add_response(
        content="<root>ä</root>".encode("latin-1"),
        headers={"Content-Type": "application/xml; charset=UTF-8"},
    )
    document = Document(
        "https://sprig.example/mislabeled.xml",
        parser_options=ParserOptions(encoding="latin-1"),
    )
    assert document.root.text_content == "ä"


def test_sample_loader():
    document = Document("sample://library")
    assert document.source_url == "sample://library"
    assert document.root.name == "library"


def test_lxml_element_tree():
    tree = etree.parse(str(TEST_FILE))
    document = Document(tree)

    assert document.source_url is None
    assert document.version == "1.0"
    assert document.encoding == "UTF-8"
    assert document.prologue[:] == [
        ProcessingInstructionNode("xml-stylesheet", 'type="text/xsl" href="books.xsl"'),
        CommentNode(" a small catalogue "),
    ]
    # lxml doesn't keep CDATA sections
    roots = document.root, Document(TEST_FILE).root
    for root in roots:
        root.query_first("book[3]/note").detach()
    assert_equal_trees(*roots)


def test_lxml_element():
    element = etree.fromstring(
        '<x:root xmlns:x="https://sprig.example/ns" x:a="b">'
        "text<!--c--><?d e?><child/>tail"
        "</x:root>"
    )
    document = Document(element)
    assert document.root.name == "root"
    assert document.root.attributes == {"a": "b"}
    assert str(document.root) == '<root a="b">text<!-- c --><?d e?><child/>tail</root>'

    document = Document(
        element,
        parser_options=ParserOptions(
            remove_comments=True, remove_processing_instructions=True
        ),
    )
    assert str(document.root) == '<root a="b">text<child/>tail</root>'

    assert element.tag == "{https://sprig.example/ns}root"


def test_lxml_whitespace():
    element = etree.fromstring("<root>\n  <a/>\n</root>")
    assert len(Document(element).root) == 1
    assert (
        len(
            Document(
                element, parser_options=ParserOptions(preserve_whitespace=True)
            ).root
        )
        == 3
    )


def test_lxml_comment_is_not_loaded():
    comment = etree.Comment("x")
    with pytest.raises(FailedDocumentLoading):
        Document(comment)
