import os
import sys
from itertools import pairwise

from sprig.typing import XMLNodeType  # noqa: TC001
from sprig.utils import compare_trees


if sys.version_info < (3, 11):  # DROPWITH Python 3.10
    from contextlib import contextmanager
    from pathlib import Path

    @contextmanager
    def chdir(path: Path):
        state = Path.cwd()
        os.chdir(path)
        yield
        os.chdir(state)

else:
    from contextlib import chdir  # noqa: F401


def assert_equal_trees(a: XMLNodeType, b: XMLNodeType):
    result = compare_trees(a, b)
    if not result:
        raise AssertionError(str(result))


def assert_nodes_are_in_document_order(*nodes: XMLNodeType):
    if len(nodes) <= 1:
        raise ValueError
    if len(nodes) > 2:
        for node_pair in pairwise(nodes):
            assert_nodes_are_in_document_order(*node_pair)
        return

    lhn, rhn = nodes
    assert lhn is not rhn

    for lhn_index, rhn_index in zip(index_path(lhn), index_path(rhn)):
        if lhn_index < rhn_index:
            return
        if lhn_index == rhn_index:
            continue
        raise AssertionError


def index_path(node: XMLNodeType):
    result = []
    while node.parent is not None:
        result.append(node.index)
        node = node.parent
    result.reverse()
    return result
