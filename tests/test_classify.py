from decimal import Decimal

from conftest import accessory, readymade, stitching

from stitchdesk.printing.classify import is_stitching_with_fabric_split, is_stitching_with_measurements


def test_measurements_required_for_slip():
    assert is_stitching_with_measurements(stitching(measurements={"chest": "40"}))
    assert not is_stitching_with_measurements(stitching(measurements={}))
    assert not is_stitching_with_measurements(accessory())
    assert not is_stitching_with_measurements(readymade())


def test_fabric_split_needs_positive_fabric_price():
    assert is_stitching_with_fabric_split(stitching(fabric_price=Decimal(800), stitching_price=Decimal(500)))
    assert not is_stitching_with_fabric_split(stitching(fabric_price=Decimal(0)))
    assert not is_stitching_with_fabric_split(stitching())
    assert not is_stitching_with_fabric_split(accessory())
