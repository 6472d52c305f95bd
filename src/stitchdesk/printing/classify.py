from __future__ import annotations

from ..domain import OrderItem, StitchingDetail


def is_stitching_with_measurements(item: OrderItem) -> bool:
    det = item.details
    return item.type == "stitching" and isinstance(det, StitchingDetail) and bool(det.measurements)


def is_stitching_with_fabric_split(item: OrderItem) -> bool:
    det = item.details
    if item.type != "stitching" or not isinstance(det, StitchingDetail):
        return False
    return det.fabric_price is not None and det.fabric_price > 0
