import pytest

from _sprig.exceptions import (
    InvalidData,
    MalformedDocument,
    OtherParsingError,
    ParsingError,
    Position,
    UnexpectedEnd,
    XMLSyntaxError,
)
from _sprig.parser import ParserOptions, decode_input, parse_document
from _sprig.parser.scanner import Scanner
from _sprig.parser.utils import detect_encoding
from sprig import parse_tree
from sprig.nodes import (
    CDataNode,
    CommentNode,
    ProcessingInstructionNode,
    TagNode,
    TextNode,
)


@pytest.mark.parametrize(
    ("stream", "encoding"),
    (
        (b"\xff\xfe\00\x00<root/>", "utf-32-le"),
        (b"\x00\x00\xfe\xff<root/>", "utf-32-be"),
        (b"\xef\xbb\xbf<root/>", "utf-8"),
        (b"\xff\xfe<root/>", "utf-16-le"),
        (b"\xfe\xff<root/>", "utf-16-be"),
        (b'<?xml version="1.0" encoding="ISO-8859-1"?><root/>', "ISO-8859-1"),
        (b"<?xml version='1.0' encoding='latin-1' ?><root/>", "latin-1"),
        (b"<root/>", None),
    ),
)
def test_encoding_detection(stream, encoding):
    assert detect_encoding(stream) == encoding


def test_decode_input():
    options = ParserOptions()
    assert decode_input("<r/>", options) == "<r/>"
    assert decode_input("<r>ä</r>".encode(), options) == "<r>ä</r>"
    assert decode_input(b"\xef\xbb\xbf<r/>", options) == "<r/>"
    assert (
        decode_input("<r>ä</r>".encode("latin-1"), ParserOptions(encoding="latin-1"))
        == "<r>ä</r>"
    )

    with pytest.raises(InvalidData, match="Could not decode data as utf-8"):
        decode_input(b"<r>\xff</r>", options)

    with pytest.raises(InvalidData, match="Could not decode data as no-such-codec"):
        decode_input(b"<r/>", ParserOptions(encoding="no-such-codec"))


def test_declaration():
    parsed = parse_document(
        '<?xml version="1.1" encoding="ISO-8859-1"?><r>ä</r>'.encode("latin-1")
    )
    assert parsed.declaration == ProcessingInstructionNode(
        "xml", 'version="1.1" encoding="ISO-8859-1"'
    )
    assert parsed.version == "1.1"
    assert parsed.encoding == "ISO-8859-1"
    assert parsed.nodes[-1].text_content == "ä"

    parsed = parse_document("<?xml version='1.0'?><r/>")
    assert parsed.encoding == "UTF-8"

    parsed = parse_document("<r/>")
    assert parsed.declaration is None
    assert parsed.version == "1.0"
    assert parsed.encoding == "UTF-8"


def test_declared_encoding_of_string_input_is_ignored():
    with pytest.warns(UserWarning, match="ISO-8859-1"):
        parse_document('<?xml version="1.0" encoding="ISO-8859-1"?><r>ä</r>')


def test_prologue():
    parsed = parse_document(
        '<?xml version="1.0"?>\n'
        '<?xml-stylesheet href="a.xsl"?>\n'
        "<!-- one -->\n"
        "<?target?>\n"
        "<r/>\n\n"
    )
    assert parsed.nodes == (
        ProcessingInstructionNode("xml-stylesheet", 'href="a.xsl"'),
        CommentNode(" one "),
        ProcessingInstructionNode("target", ""),
        parsed.nodes[-1],
    )
    assert parsed.nodes[-1].name == "r"
    assert all(n.parent is None for n in parsed.nodes)


def test_processing_instruction_as_first_node():
    parsed = parse_document("<?pi data?><r/>")
    assert parsed.declaration is None
    assert parsed.nodes[0] == ProcessingInstructionNode("pi", "data")


@pytest.mark.parametrize(
    ("options", "expected_size"),
    (
        (ParserOptions(), 1),
        (ParserOptions(remove_comments=True), 0),
        (ParserOptions(remove_processing_instructions=True), 1),
    ),
)
def test_prologue_options(options, expected_size):
    assert len(parse_document("<!--c--><r/>", options).nodes) == expected_size + 1


def test_comment_and_element_children():
    root = parse_tree("<r><!--c--><x/></r>")
    assert root.name == "r"
    assert len(root) == 2
    comment, element = root[:]
    assert isinstance(comment, CommentNode)
    assert comment.content == "c"
    assert isinstance(element, TagNode)
    assert element.name == "x"
    assert len(element) == 0
    assert comment.parent is element.parent is root


def test_content_kinds():
    root = parse_tree(
        "<r>a<b>b</b>c<!-- d --><![CDATA[<e>&amp;]]><?f g h?>i&lt;</r>"
    )
    assert [type(n) for n in root.iterate_children()] == [
        TextNode,
        TagNode,
        TextNode,
        CommentNode,
        CDataNode,
        ProcessingInstructionNode,
        TextNode,
    ]
    assert root[4].content == "<e>&amp;"
    assert root[5].target == "f"
    assert root[5].content == "g h"
    assert root[6].content == "i<"


def test_attributes():
    root = parse_tree(
        """<r a="1" b = '2'  c="&quot;x&apos; &amp;lt;" a="3" d=""/>"""
    )
    assert root.attributes == {"a": "3", "b": "2", "c": "\"x' &lt;", "d": ""}


def test_entities_in_text():
    root = parse_tree("<r>&lt;b&gt; &amp;amp; &copy; &#42;</r>")
    assert root.text_content == "<b> &amp; &copy; &#42;"


def test_whitespace():
    assert len(parse_tree("<r>\n  <a/>\n  <b/>\n</r>")) == 2

    root = parse_tree(
        "<r>\n  <a/>\n  <b/>\n</r>", ParserOptions(preserve_whitespace=True)
    )
    assert len(root) == 5
    assert root[0].content == "\n  "

    root = parse_tree("<r> a <b/> </r>")
    assert root[0].content == " a "
    assert len(root) == 2


def test_text_coalesces_around_removed_nodes():
    options = ParserOptions(remove_comments=True, remove_processing_instructions=True)
    root = parse_tree("<r>a<!--c-->b<?pi?>c</r>", options)
    assert len(root) == 1
    assert root[0].content == "abc"

    root = parse_tree("<r>a<!--c-->b<?pi?>c</r>")
    assert len(root) == 5


def test_deeply_nested_document():
    depth = 5000
    root = parse_tree("<a>" * depth + "x" + "</a>" * depth)
    node = root
    while node.first_child is not None and isinstance(node.first_child, TagNode):
        node = node.first_child
    assert node.depth == depth - 1
    assert node.text_content == "x"


AFTER_ROOT = "Unexpected content after root element"
UNQUOTED = "Expected attribute value to start with quote"


@pytest.mark.parametrize(
    ("data", "exception", "message", "position"),
    (
        ("<a><c></a>", MalformedDocument, "Mismatched tags: <c> and </a>", (1, 11)),
        ("<a>\n<b>\n</a>", MalformedDocument, "Mismatched tags: <b> and </a>", (3, 5)),
        ("<a/>x", MalformedDocument, AFTER_ROOT, (1, 5)),
        ("<a/><!--c-->", MalformedDocument, AFTER_ROOT, (1, 5)),
        ("<a/><b/>", MalformedDocument, AFTER_ROOT, (1, 5)),
        ("<1a/>", XMLSyntaxError, "Expected XML name", (1, 2)),
        ("<a b/>", XMLSyntaxError, "Expected '='", (1, 5)),
        ('<a b "c"/>', XMLSyntaxError, "Expected '='", (1, 6)),
        ("<a b=c/>", XMLSyntaxError, UNQUOTED, (1, 6)),
        ("", XMLSyntaxError, "Expected '<'", (1, 1)),
        ("text", XMLSyntaxError, "Expected '<'", (1, 1)),
        ("<a></ a>", XMLSyntaxError, "Expected XML name", (1, 6)),
        ('<a b="c/>', UnexpectedEnd, "Unterminated attribute value", (1, 10)),
        ("<a><b>x</b>", UnexpectedEnd, "Unterminated element <a>", (1, 12)),
        ("<a><!-- x", UnexpectedEnd, "Unterminated comment", (1, 10)),
        ("<a><![CDATA[x", UnexpectedEnd, "Unterminated CDATA section", (1, 14)),
        ("<a><?pi x", UnexpectedEnd, "Unterminated processing instruction", (1, 10)),
        ("<!DOCTYPE a><a/>", OtherParsingError, "Document type declarations", (1, 1)),
    ),
)
def test_errors(data, exception, message, position):
    with pytest.raises(exception, match=message) as excinfo:
        parse_tree(data)
    assert excinfo.value.position == Position(*position)
    assert isinstance(excinfo.value, ParsingError)


def test_error_message():
    with pytest.raises(MalformedDocument) as excinfo:
        parse_tree("<a><c></a>")
    assert str(excinfo.value) == (
        "Malformed XML: Mismatched tags: <c> and </a> at line 1, column 11"
    )
    assert "c" in excinfo.value.message
    assert "a" in excinfo.value.message


def test_scanner():
    scanner = Scanner("ab\ncd\n\nef")
    assert scanner.location == (1, 1)
    assert scanner.current == "a"
    scanner.advance(2)
    assert scanner.location == (1, 3)
    assert scanner.current == "\n"
    scanner.advance()
    assert scanner.location == (2, 1)
    scanner.advance(4)
    assert scanner.location == (4, 1)
    assert scanner.current == "e"
    scanner.advance(10)
    assert scanner.at_end
    assert scanner.current == ""
    assert scanner.location == (4, 3)


def test_scanner_read_until():
    scanner = Scanner("abc-->d")
    assert scanner.read_until("-->", "comment") == "abc"
    assert scanner.current == "d"

    with pytest.raises(UnexpectedEnd, match="Unterminated comment"):
        scanner.read_until("-->", "comment")
