from decimal import Decimal

from smartration.domain.receipt import ReceiptLineItem
from smartration.receipt.ocr_parser import SkippedLine, _extract_items


def test_extract_items_simple_line() -> None:
    items, candidate_total = _extract_items(["Bananas 1.29"])

    assert items == [ReceiptLineItem(name="Bananas", unit_price=Decimal("1.29"), quantity=1)]
    assert candidate_total is None


def test_extract_items_leading_quantity() -> None:
    items, _ = _extract_items(["2 Bananas 1.29"])

    assert items == [ReceiptLineItem(name="Bananas", unit_price=Decimal("1.29"), quantity=2)]


def test_extract_items_uses_last_price_of_modifier_span() -> None:
    items, _ = _extract_items(["Apples 2 @ 6.49/EA 12.98", "Oranges 3 @ 1.50", "Bread 2.50 F"])

    assert [(item.name, item.unit_price) for item in items] == [
        ("Apples", Decimal("12.98")),
        ("Oranges", Decimal("1.50")),
        ("Bread", Decimal("2.50")),
    ]


def test_extract_items_rejects_modifier_without_name() -> None:
    skipped: list[SkippedLine] = []

    items, candidate_total = _extract_items(["2 @ 0.50/EA 1.00"], skipped)

    assert items == []
    assert candidate_total is None
    assert skipped == [SkippedLine(line="2 @ 0.50/EA 1.00", rule="empty_name")]


def test_extract_items_price_bounds() -> None:
    skipped: list[SkippedLine] = []

    items, _ = _extract_items(["TV Stand 149.99", "Free Sample 0.00", "Eggs 99.99"], skipped)

    assert [item.name for item in items] == ["Eggs"]
    assert [entry.rule for entry in skipped] == ["implausible_price", "non_positive_price"]


def test_extract_items_large_unlabelled_amount_is_total_candidate() -> None:
    items, candidate_total = _extract_items(["Milk 3.49", "$ 75.00", "X 62.10"])

    assert [item.name for item in items] == ["Milk"]
    assert candidate_total == Decimal("75.00")


def test_extract_items_skips_metadata_and_priceless_lines() -> None:
    skipped: list[SkippedLine] = []
    lines = ["VISA AUTH CODE 123456 45.00", "Whole Milk", "Milk 3.49"]

    items, candidate_total = _extract_items(lines, skipped)

    assert [item.name for item in items] == ["Milk"]
    assert candidate_total is None
    assert [entry.rule for entry in skipped] == ["receipt_metadata", "no_price"]


def test_extract_items_rejects_implausible_names() -> None:
    skipped: list[SkippedLine] = []
    long_line = "Organic whole grain multiseed sandwich bread family size loaf 4.99"

    items, _ = _extract_items(["12345 6.00", long_line], skipped)

    assert items == []
    assert [entry.rule for entry in skipped] == ["pure_digits", "too_long"]


def test_extract_items_collapses_repeated_words_in_name() -> None:
    items, _ = _extract_items(["Milk Milk 3.49"])
    raw_items, _ = _extract_items(["Milk Milk 3.49"], collapse_repeats=False)

    assert items[0].name == "Milk"
    assert raw_items[0].name == "Milk Milk"


def test_extract_items_ignores_glued_payment_and_tax_lines() -> None:
    items, _ = _extract_items(["Milk 3.49", "DEBITPAYMENT 45.00", "NONTAXABLE 2.00"])

    assert [(item.name, item.unit_price) for item in items] == [("Milk", Decimal("3.49"))]


def test_extract_items_amount_of_100_or_more_is_never_a_total() -> None:
    skipped: list[SkippedLine] = []

    items, candidate_total = _extract_items(["Milk 3.49", "$ 145.00"], skipped)

    assert [item.name for item in items] == ["Milk"]
    assert candidate_total is None
    assert skipped == [SkippedLine(line="$ 145.00", rule="implausible_price")]
