# marketpay/domain/fees.py
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Dict, List, Tuple

PLATFORM_FEE_PERCENT = 5


def to_minor_units(amount) -> int:
    """Kwota w dolarach -> centy, zaokraglenie half-up."""
    value = Decimal(str(amount)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_seller_total(seller_total) -> Tuple[int, int]:
    """
    Zwraca (seller_amount, platform_fee) w centach.
    Prowizja liczona od kwoty w centach, sprzedawca dostaje reszte,
    wiec seller_amount + platform_fee == to_minor_units(seller_total).
    """
    gross = to_minor_units(seller_total)
    fee = Decimal(gross * PLATFORM_FEE_PERCENT) / 100
    platform_fee = int(fee.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return gross - platform_fee, platform_fee


def group_by_seller(items: Iterable[dict]) -> Dict[str, List[dict]]:
    """Items without seller_id are platform sales and are left out."""
    grouped: Dict[str, List[dict]] = defaultdict(list)
    for item in items:
        seller_id = item.get("seller_id")
        if seller_id:
            grouped[seller_id].append(item)
    return dict(grouped)


def seller_total(items: Iterable[dict]) -> Decimal:
    return sum(
        (Decimal(str(i["price"])) * int(i["quantity"]) for i in items),
        Decimal("0.00"),
    )
