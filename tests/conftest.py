from pathlib import Path

import pytest

# keep this before imports from sprig!
from tests import plugins  # noqa: F401

from sprig import DefaultStringOptions, Document


FILES_PATH = Path(__file__).parent / "files"


@pytest.fixture
def files_path():
    return FILES_PATH


@pytest.fixture
def books_document():
    return Document(FILES_PATH / "books.xml")


@pytest.fixture
def queries_sample():
    return Document(
        """\
            <root>
                <node n="1"/>
                <node n="2"/>
                <node/>
                <node n="3"/>
            </root>
        """
    )


@pytest.fixture(autouse=True)
def _reset_serializer():
    DefaultStringOptions.reset_defaults()
