import pytest

from quantity_transformer import (
    Quantity,
    QuantityGroup,
    ValidationResult,
    find_default_quantity,
    format_number,
    get_quantity_display_text,
    transform_quantity_group,
    transform_quantity_groups,
    validate_custom_quantity,
)


@pytest.fixture()
def custom_quantity():
    return Quantity(id="custom-1", name="Custom...", value=None, is_custom=True, min_value=100, max_value=10000)


@pytest.fixture()
def unbounded_custom():
    return Quantity(id="custom-2", name="Custom...", value=None, is_custom=True)


@pytest.fixture()
def standard_quantity():
    return Quantity(id="standard-1", name="500", value=500, is_custom=False)


# ----------------------------
# transform_quantity_group
# ----------------------------
def test_transform_with_custom_option(mock_group):
    result = transform_quantity_group(mock_group)

    assert len(result) == 5
    assert result[0] == Quantity(id="test-group-1-0", name="100", value=100, is_custom=False)
    assert result[3] == Quantity(id="test-group-1-3", name="1000", value=1000, is_custom=False)
    assert result[4] == Quantity(
        id="test-group-1-4", name="Custom...", value=None, is_custom=True, min_value=10, max_value=50000
    )


def test_transform_preserves_order(mock_group):
    names = [q.name for q in transform_quantity_group(mock_group)]
    assert names == ["100", "250", "500", "1000", "Custom..."]


def test_transform_is_repeatable(mock_group):
    assert transform_quantity_group(mock_group) == transform_quantity_group(mock_group)


def test_transform_without_custom_option(mock_group_no_custom):
    result = transform_quantity_group(mock_group_no_custom)

    assert len(result) == 4
    for i, q in enumerate(result):
        assert q.is_custom is False
        assert q.min_value is None
        assert q.max_value is None
        assert q.id == f"test-group-2-{i}"
    assert result[2].value == 100


@pytest.mark.parametrize("values", ["", None])
def test_transform_empty_values(values):
    assert transform_quantity_group(QuantityGroup(id="g", values=values)) == []


def test_transform_drops_blank_tokens():
    result = transform_quantity_group(QuantityGroup(id="g", values="100,,250,   ,500"))
    assert [q.name for q in result] == ["100", "250", "500"]
    assert [q.id for q in result] == ["g-0", "g-1", "g-2"]


def test_custom_detection_is_case_insensitive():
    result = transform_quantity_group(QuantityGroup(id="g", values="100,250,Custom,500"))
    assert len(result) == 4
    assert result[2].is_custom is True
    assert result[2].name == "Custom..."


def test_non_numeric_tokens_kept_as_labels():
    result = transform_quantity_group(
        QuantityGroup(id="test-group-1", values="abc,100,xyz,250,custom", custom_min=10, custom_max=50000)
    )
    assert len(result) == 5
    assert result[0] == Quantity(id="test-group-1-0", name="abc", value=None, is_custom=False)
    assert result[1].value == 100
    assert result[2].value is None
    assert result[4].is_custom is True


def test_leading_digits_are_parsed():
    result = transform_quantity_group(QuantityGroup(id="g", values="250pcs,12.5"))
    assert [q.value for q in result] == [250, 12]
    assert [q.name for q in result] == ["250pcs", "12.5"]


def test_to_dict_uses_camel_case(mock_group):
    assert transform_quantity_group(mock_group)[4].to_dict() == {
        "id": "test-group-1-4",
        "name": "Custom...",
        "value": None,
        "isCustom": True,
        "minValue": 10,
        "maxValue": 50000,
    }


def test_group_from_dict():
    g = QuantityGroup.from_dict(
        {"id": "g1", "values": "100,custom", "defaultValue": "custom", "customMin": 5, "customMax": 500}
    )
    assert g.default_value == "custom"
    assert transform_quantity_group(g)[1].max_value == 500


# ----------------------------
# transform_quantity_groups
# ----------------------------
def test_transform_many_groups(mock_group, mock_group_no_custom):
    result = transform_quantity_groups([mock_group, mock_group_no_custom])

    assert len(result) == 9
    ids = [q.id for q in result]
    assert len(set(ids)) == len(ids)

    customs = [q for q in result if q.is_custom]
    assert len(customs) == 1
    assert customs[0].min_value == 10
    assert customs[0].max_value == 50000


def test_transform_many_groups_empty():
    assert transform_quantity_groups([]) == []


# ----------------------------
# find_default_quantity
# ----------------------------
def test_default_by_value(mock_group):
    found = find_default_quantity(transform_quantity_group(mock_group), "500")
    assert found is not None
    assert found.value == 500
    assert found.name == "500"


def test_default_custom(mock_group):
    found = find_default_quantity(transform_quantity_group(mock_group), "CUSTOM")
    assert found is not None
    assert found.is_custom is True
    assert found.name == "Custom..."


def test_default_custom_missing(mock_group_no_custom):
    assert find_default_quantity(transform_quantity_group(mock_group_no_custom), "custom") is None


def test_default_not_found(mock_group):
    assert find_default_quantity(transform_quantity_group(mock_group), "999") is None


def test_default_matches_label_only_option():
    options = transform_quantity_group(QuantityGroup(id="g", values="Sample Pack,100"))
    assert find_default_quantity(options, "Sample Pack").id == "g-0"


def test_default_none():
    assert find_default_quantity([], None) is None


# ----------------------------
# validate_custom_quantity
# ----------------------------
def test_valid_custom_quantity(custom_quantity):
    result = validate_custom_quantity(500, custom_quantity)
    assert result.is_valid is True
    assert result.error is None
    assert result.to_dict() == {"isValid": True}


def test_below_minimum(custom_quantity):
    assert validate_custom_quantity(50, custom_quantity) == ValidationResult(False, "Minimum quantity is 100")


def test_above_maximum(custom_quantity):
    assert validate_custom_quantity(15000, custom_quantity) == ValidationResult(False, "Maximum quantity is 10,000")


@pytest.mark.parametrize("value", [0, -5])
def test_zero_or_negative(custom_quantity, value):
    result = validate_custom_quantity(value, custom_quantity)
    assert result.error == "Quantity must be greater than 0"


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_values_rejected(custom_quantity, unbounded_custom, value):
    expected = ValidationResult(False, "Quantity must be a finite number")
    assert validate_custom_quantity(value, custom_quantity) == expected
    assert validate_custom_quantity(value, unbounded_custom) == expected


def test_not_custom(standard_quantity):
    result = validate_custom_quantity(500, standard_quantity)
    assert result.is_valid is False
    assert result.error == "Quantity is not a custom option"


def test_unbounded(unbounded_custom):
    assert validate_custom_quantity(500, unbounded_custom).is_valid is True


def test_gang_run_increment(unbounded_custom):
    result = validate_custom_quantity(7777, unbounded_custom)
    assert result.to_dict() == {
        "isValid": False,
        "error": "Quantities above 5000 must be in increments of 5000. Try 5,000 or 10,000",
    }
    assert validate_custom_quantity(5000, unbounded_custom).is_valid is True
    assert validate_custom_quantity(4999, unbounded_custom).is_valid is True
    assert validate_custom_quantity(55000, unbounded_custom).is_valid is True


def test_gang_run_suggestions_for_large_values(unbounded_custom):
    result = validate_custom_quantity(123456, unbounded_custom)
    assert result.error.endswith("Try 120,000 or 125,000")


def test_increment_rule_checked_before_bounds(custom_quantity):
    # 12345 is above max too, but the increment message wins
    result = validate_custom_quantity(12345, custom_quantity)
    assert result.error.startswith("Quantities above 5000")


@pytest.mark.parametrize(
    "value,valid,error",
    [
        (100, True, None),
        (10000, True, None),
        (99, False, "Minimum quantity is 100"),
        (10001, False, "Quantities above 5000 must be in increments of 5000. Try 10,000 or 15,000"),
    ],
)
def test_bounds_are_inclusive(custom_quantity, value, valid, error):
    result = validate_custom_quantity(value, custom_quantity)
    assert result.is_valid is valid
    assert result.error == error


def test_max_message_when_aligned():
    q = Quantity(id="c", name="Custom...", value=None, is_custom=True, min_value=100, max_value=10001)
    assert validate_custom_quantity(10002, q).error.startswith("Quantities above 5000")
    q = Quantity(id="c", name="Custom...", value=None, is_custom=True, min_value=100, max_value=4000)
    assert validate_custom_quantity(4001, q).error == "Maximum quantity is 4,000"


# ----------------------------
# get_quantity_display_text
# ----------------------------
def test_display_standard(standard_quantity):
    assert get_quantity_display_text(standard_quantity) == "500 units"


def test_display_large_standard():
    q = Quantity(id="s", name="25000", value=25000, is_custom=False)
    assert get_quantity_display_text(q) == "25,000 units"


def test_display_custom_with_value(custom_quantity):
    assert get_quantity_display_text(custom_quantity, 1500) == "Custom: 1,500 units"


def test_display_custom_without_value(custom_quantity):
    assert get_quantity_display_text(custom_quantity) == "Custom quantity"


def test_display_label_only():
    q = Quantity(id="t", name="Test Quantity", value=None, is_custom=False)
    assert get_quantity_display_text(q) == "Test Quantity"


def test_display_does_not_mutate(custom_quantity):
    before = custom_quantity.to_dict()
    get_quantity_display_text(custom_quantity, 2000)
    assert custom_quantity.to_dict() == before


@pytest.mark.parametrize(
    "n,expected",
    [(5000, "5,000"), (10000.0, "10,000"), (1234567, "1,234,567"), (7777.5, "7,777.5"), (0.125, "0.125")],
)
def test_format_number(n, expected):
    assert format_number(n) == expected
