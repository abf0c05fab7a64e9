from copy import copy, deepcopy
from io import BytesIO

import pytest

from sprig import Document, ParserOptions, parse_tree
from sprig.exceptions import (
    FailedDocumentLoading,
    InvalidOperation,
    MalformedDocument,
)
from sprig.filters import is_tag_node
from sprig.nodes import CommentNode, ProcessingInstructionNode, TagNode, TextNode
from sprig.utils import get_traverser

from tests.utils import assert_equal_trees, index_path


def test_defaults():
    document = Document("<root/>")
    assert document.version == "1.0"
    assert document.encoding == "UTF-8"
    assert document.declaration == ProcessingInstructionNode(
        "xml", 'version="1.0" encoding="UTF-8"'
    )
    assert len(document.prologue) == 0
    assert document.source_url is None
    assert document.config.parser_options == ParserOptions()


def test_parsed_declaration_is_kept():
    document = Document(b"<?xml version='1.1' standalone='yes'?>\n<root/>")
    assert document.version == "1.1"
    assert document.encoding == "UTF-8"
    assert str(document) == "<?xml version='1.1' standalone='yes'?>\n<root/>"

    document.encoding = "ISO-8859-1"
    assert document.declaration.content == 'version="1.1" encoding="ISO-8859-1"'


def test_declaration_setter():
    document = Document("<root/>")

    document.declaration = ProcessingInstructionNode("xml", 'version="1.0"')
    assert str(document) == '<?xml version="1.0"?>\n<root/>'

    with pytest.raises(TypeError):
        document.declaration = ProcessingInstructionNode("other", "")
    with pytest.raises(TypeError):
        document.declaration = CommentNode("xml")

    document.declaration = None
    document.version = "1.1"
    assert document.declaration is None
    assert str(document) == "<root/>"


def test_prologue():
    document = Document("<?a?><!--b--><?c d?><root/>")

    assert document.prologue[:] == [
        ProcessingInstructionNode("a", ""),
        CommentNode("b"),
        ProcessingInstructionNode("c", "d"),
    ]
    assert document.processing_instructions == (
        ProcessingInstructionNode("a", ""),
        ProcessingInstructionNode("c", "d"),
    )
    assert document.comments == (CommentNode("b"),)

    comment = document.prologue.append(CommentNode("e"))
    document.prologue.prepend(CommentNode("0"))
    document.prologue.insert(2, ProcessingInstructionNode("x", ""))
    assert [str(n) for n in document.prologue] == [
        "<!-- 0 -->",
        "<?a?>",
        "<?x?>",
        "<!-- b -->",
        "<?c d?>",
        "<!-- e -->",
    ]
    assert document.prologue.index(comment) == 5
    assert comment in document
    assert comment.parent is None

    document.prologue.remove(comment)
    assert comment.document is None
    assert len(document.prologue) == 5

    with pytest.raises(ValueError):
        document.prologue.remove(comment)
    with pytest.raises(ValueError):
        document.prologue.index(document.root)
    with pytest.raises(ValueError):
        document.prologue.remove(document.root)

    document.prologue.clear()
    assert len(document.prologue) == 0
    assert document.root.name == "root"


@pytest.mark.parametrize(
    ("node", "exception"),
    (
        (TagNode("x"), TypeError),
        (TextNode("x"), TypeError),
        (ProcessingInstructionNode("xml", 'version="1.0"'), ValueError),
    ),
)
def test_invalid_prologue_nodes(node, exception):
    document = Document("<root/>")
    with pytest.raises(exception):
        document.prologue.append(node)


def test_prologue_rejects_attached_nodes():
    document = Document("<root><!--c--></root>")
    with pytest.raises(InvalidOperation):
        document.prologue.append(document.root.first_child)
    with pytest.raises(IndexError):
        document.prologue.insert(1, CommentNode("x"))


def test_root():
    document = Document("<!--c--><root><a/></root>")
    old_root = document.root

    new_root = TagNode("new")
    document.root = new_root
    assert document.root is new_root
    assert new_root.parent is None
    assert new_root.document is document
    assert old_root.document is None
    assert str(document).endswith("<!-- c -->\n<new/>")

    with pytest.raises(TypeError):
        document.root = CommentNode("x")
    child = new_root.append_children(TagNode("x"))[0]
    with pytest.raises(InvalidOperation):
        document.root = child
    assert child.parent is new_root


def test_contains():
    document_a = Document("<root><a/></root>")
    document_b = Document("<root><a/></root>")

    a = document_a.root[0]
    assert a in document_a
    assert a not in document_b
    assert a.clone() not in document_a

    a.detach()
    assert a not in document_a


def test_clone():
    document = Document(
        '<?xml version="1.0" encoding="UTF-8"?><!--c--><root x="y"><a>b</a></root>',
        parser_options=ParserOptions(preserve_whitespace=True),
        source_url="https://sprig.example/doc.xml",
    )
    for cloned in (document.clone(), copy(document), deepcopy(document)):
        assert cloned.root is not document.root
        assert_equal_trees(cloned.root, document.root)
        assert cloned.prologue[0] == document.prologue[0]
        assert cloned.prologue[0] is not document.prologue[0]
        assert cloned.declaration == document.declaration
        assert cloned.source_url == document.source_url
        assert cloned.config.parser_options == document.config.parser_options
        assert str(cloned) == str(document)

        traverser = get_traverser(depth_first=True, from_top=True)
        for node in traverser(document.root, is_tag_node):
            cloned_node = cloned.root
            for index in index_path(node):
                cloned_node = cloned_node[index]
            assert node.name == cloned_node.name
            assert node.attributes == cloned_node.attributes
            assert node is not cloned_node


def test_queries(books_document):
    assert books_document.query("book").size == 3
    assert books_document.query("book[@category='fiction']/title").size == 2
    assert books_document.css_select("author").size == 4
    assert books_document.query_first("book[2]")["id"] == "bk2"
    assert books_document.query_first("book[4]") is None


def test_books_file(books_document):
    assert books_document.source_url.endswith("/tests/files/books.xml")
    assert books_document.processing_instructions[0].target == "xml-stylesheet"
    assert books_document.comments[0].content == " a small catalogue "
    note = books_document.query_first("book[3]/note")
    assert note.first_child.content == "Published <posthumously> in 1925."


def test_failed_loading():
    with pytest.raises(FailedDocumentLoading) as excinfo:
        Document(0)
    assert len(excinfo.value.excuses) > 1
    assert "0" in str(excinfo.value)


def test_parsing_errors_are_excuses():
    with pytest.raises(FailedDocumentLoading) as excinfo:
        Document("<a><c></a>")
    assert any(isinstance(x, MalformedDocument) for x in excinfo.value.excuses.values())


def test_attached_tag_node_is_rejected():
    root = parse_tree("<root/>")
    root.append_children(TagNode("child"))
    with pytest.raises(FailedDocumentLoading):
        Document(root.first_child)


def test_write():
    document = Document("<root>ü</root>")
    buffer = BytesIO()
    document.write(buffer)
    assert buffer.getvalue() == (
        '<?xml version="1.0" encoding="UTF-8"?>\n<root>ü</root>'.encode()
    )
    assert not buffer.closed


def test_loading_from_a_plugin():
    document = Document("sample://library")
    assert document.source_url == "sample://library"
    assert document.query("book[2]").first.text_content == "Emma"
