import pytest

from stitchdesk.domain import InvalidArgument
from stitchdesk.printing.paginate import INVOICE_PAGE_SIZE, SLIP_PAGE_SIZE, paginate


def test_empty_input_gives_no_pages():
    assert paginate([], 12) == []


def test_pages_concatenate_back_in_order():
    items = list(range(13))
    pages = paginate(items, INVOICE_PAGE_SIZE)
    assert [len(p) for p in pages] == [12, 1]
    assert [x for p in pages for x in p] == items


def test_exact_multiple_has_no_trailing_empty_page():
    assert paginate(list(range(4)), SLIP_PAGE_SIZE) == [[0, 1], [2, 3]]


def test_page_size_larger_than_input():
    assert paginate(["a", "b"], 12) == [["a", "b"]]


@pytest.mark.parametrize("size", [0, -1, True, 2.5, "2"])
def test_invalid_page_size(size):
    with pytest.raises(InvalidArgument):
        paginate([1, 2, 3], size)
