from itertools import zip_longest

import pytest
from lxml import etree

from sprig import Document, parse_tree
from sprig.filters import any_of, is_cdata_node, is_tag_node, is_text_node


SAMPLES = (
    "<a/>",
    '<a x="1" y="&quot;2&quot;"><b>text &amp; more</b><c/></a>',
    "<a>head<b>inner</b>tail<c>x<d>y</d>z</c></a>",
    "<a>&lt;&gt;&apos;&quot;</a>",
    "<a><![CDATA[<b>]]></a>",
    "<a>\n  <b>one</b>\n  <b>two</b>\n</a>",
)


def character_data(node):
    """Text and CDATA contents, lxml doesn't distinguish them."""
    return "".join(
        n.content for n in node.iterate_descendants(any_of(is_text_node, is_cdata_node))
    )


def without_whitespace(text):
    return "".join(text.split())


def assert_conforming_trees(lxml_element, sprig_node):
    for lxml_child, sprig_child in zip_longest(
        (c for c in lxml_element if isinstance(c.tag, str)),
        sprig_node.iterate_children(is_tag_node),
    ):
        assert lxml_child is not None and sprig_child is not None
        assert lxml_child.tag == sprig_child.name
        assert dict(lxml_child.attrib) == sprig_child.attributes.as_dict()
        assert without_whitespace("".join(lxml_child.itertext())) == (
            without_whitespace(character_data(sprig_child))
        )
        assert_conforming_trees(lxml_child, sprig_child)


@pytest.mark.parametrize("sample", SAMPLES)
def test_samples(sample):
    lxml_root = etree.fromstring(sample)
    sprig_root = parse_tree(sample)
    assert lxml_root.tag == sprig_root.name
    assert dict(lxml_root.attrib) == sprig_root.attributes.as_dict()
    assert without_whitespace("".join(lxml_root.itertext())) == without_whitespace(
        character_data(sprig_root)
    )
    assert_conforming_trees(lxml_root, sprig_root)


def test_books(files_path):
    lxml_tree = etree.parse(str(files_path / "books.xml"))
    document = Document(files_path / "books.xml")

    assert lxml_tree.docinfo.xml_version == document.version
    assert lxml_tree.docinfo.encoding == document.encoding
    assert_conforming_trees(lxml_tree.getroot(), document.root)


def test_queries_agree_with_xpath(files_path):
    lxml_root = etree.parse(str(files_path / "books.xml")).getroot()
    document = Document(files_path / "books.xml")

    for expression, xpath in (
        ("book/title", "book/title"),
        ("book[2]/author", "book[2]/author"),
        ("book[@category='fiction']/price", "book[@category='fiction']/price"),
        ("book/title[@lang='de']", "book/title[@lang='de']"),
    ):
        assert [character_data(n) for n in document.query(expression)] == [
            e.text for e in lxml_root.xpath(xpath)
        ]


def test_serialization_is_accepted_by_lxml(files_path):
    document = Document(files_path / "books.xml")
    reparsed = etree.fromstring(str(document).encode())
    assert_conforming_trees(reparsed, document.root)
