from slip_publish.util.parsing import parse_series, safe_float, safe_int


def test_safe_float_parses_numeric_inputs() -> None:
    assert safe_float(1) == 1.0
    assert safe_float(1.5) == 1.5
    assert safe_float("-2.25") == -2.25
    assert safe_float(True) is None
    assert safe_float("  ") is None
    assert safe_float("abc") is None
    assert safe_float("nan") is None
    assert safe_float(float("inf")) is None


def test_safe_int_parses_integer_like_inputs() -> None:
    assert safe_int(1) == 1
    assert safe_int(1.9) == 1
    assert safe_int("+120") == 120
    assert safe_int("9805821") == 9805821
    assert safe_int(True) is None
    assert safe_int("") is None
    assert safe_int("x") is None
    assert safe_int(None) is None


def test_parse_series_skips_malformed_tokens() -> None:
    assert parse_series("10|12|x|8") == (10.0, 12.0, 8.0)
    assert parse_series(" 2.5 | 3 |4 ") == (2.5, 3.0, 4.0)
    assert parse_series("1||2|") == (1.0, 2.0)


def test_parse_series_blank_inputs_are_empty() -> None:
    assert parse_series("") == ()
    assert parse_series("   ") == ()
    assert parse_series(None) == ()
    assert parse_series("x|y") == ()
