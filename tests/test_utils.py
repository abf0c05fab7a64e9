import pytest

from sprig import parse_tree
from sprig.nodes import CommentNode, TagNode, TextNode
from sprig.utils import (
    TreeDifferenceKind,
    compare_trees,
    first,
    get_traverser,
    last,
)


def test_first():
    assert first([]) is None
    assert first([1, None]) == 1
    assert first(()) is None
    assert first((None, 1)) is None

    iterator = iter((1, 2, 3))
    assert first(iterator) == 1
    assert first(iterator) == 2
    assert first(iter(())) is None

    with pytest.raises(TypeError):
        first({})


def test_last():
    assert last([]) is None
    assert last([None, 1]) == 1
    assert last(iter((1, 2, 3))) == 3
    assert last(iter(())) is None

    with pytest.raises(TypeError):
        last({})


TRAVERSAL_SAMPLE = "<a><b><c/><d/></b><e><f/></e></a>"


@pytest.mark.parametrize(
    ("depth_first", "from_top", "expected"),
    (
        (True, True, "abcdef"),
        (False, True, "abecdf"),
        (True, False, "cdbfea"),
    ),
)
def test_traversers(depth_first, from_top, expected):
    root = parse_tree(TRAVERSAL_SAMPLE)
    traverser = get_traverser(depth_first=depth_first, from_top=from_top)
    assert "".join(n.name for n in traverser(root)) == expected


def test_traverser_filters():
    root = parse_tree("<a><b>x</b>y<c/></a>")
    traverser = get_traverser(depth_first=True, from_top=False)
    assert [n.content for n in traverser(root, lambda n: isinstance(n, TextNode))] == [
        "x",
        "y",
    ]


def test_unsupported_traverser():
    with pytest.raises(NotImplementedError):
        get_traverser(depth_first=False, from_top=False)


def test_traverser_on_leaf_node():
    node = CommentNode("x")
    traverser = get_traverser(depth_first=True, from_top=False)
    assert list(traverser(node)) == [node]


def test_compare_equal_trees():
    result = compare_trees(
        parse_tree('<a x="1"><b>text</b><!--c--></a>'),
        parse_tree('<a x="1"><b>text</b><!--c--></a>'),
    )
    assert result
    assert result.difference_kind is TreeDifferenceKind.None_
    assert str(result) == "Trees are equal."


@pytest.mark.parametrize(
    ("lhs", "rhs", "kind"),
    (
        ("<a><b/></a>", "<a><c/></a>", TreeDifferenceKind.TagName),
        ('<a><b x="1"/></a>', '<a><b x="2"/></a>', TreeDifferenceKind.TagAttributes),
        ("<a><b/></a>", "<a><b/><b/></a>", TreeDifferenceKind.TagChildrenSize),
        ("<a>x</a>", "<a>y</a>", TreeDifferenceKind.NodeContent),
        ("<a>x</a>", "<a><!--x--></a>", TreeDifferenceKind.NodeType),
    ),
)
def test_compare_different_trees(lhs, rhs, kind):
    result = compare_trees(parse_tree(lhs), parse_tree(rhs))
    assert not result
    assert result.difference_kind is kind
    assert str(result)


def test_comparison_messages():
    result = compare_trees(parse_tree("<a><b/></a>"), parse_tree("<a><c/></a>"))
    assert str(result) == "Names of tag nodes at /b[1] differ: b != c"

    result = compare_trees(parse_tree("<a>x</a>"), parse_tree("<a>y</a>"))
    assert str(result).startswith(
        "Nodes' content differ, parent node has location_path"
    )

    result = compare_trees(TextNode("x"), CommentNode("x"))
    assert str(result).startswith("Nodes are of different type:")


def test_first_difference_is_reported():
    lhr = TagNode("a", children=[TagNode("b"), TagNode("c")])
    rhr = TagNode("a", children=[TagNode("x"), TagNode("y")])
    result = compare_trees(lhr, rhr)
    assert result.lhn is lhr[0]
    assert result.rhn is rhr[0]
