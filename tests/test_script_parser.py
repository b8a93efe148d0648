import pytest

from covid19mx.script_parser import parse_base10, parse_script


def test_parses_well_formed_entries() -> None:
    assert parse_script("'01001'=5;'01002'=3;") == {"01001": 5, "01002": 3}


def test_body_sentinel_stops_the_scan() -> None:
    text = "'01001'=5;'01002'=3;'body'=0;'09999'=1;"
    assert parse_script(text) == {"01001": 5, "01002": 3}


def test_new_array_entries_are_dropped() -> None:
    assert parse_script("'02001'= new Array();'02002'=7;") == {"02002": 7}


def test_non_numeric_values_are_skipped_without_aborting() -> None:
    text = "'01001'=abc;'01002'=4;'01003'=1.5;'01004'=9;"
    assert parse_script(text) == {"01002": 4, "01004": 9}


def test_values_must_be_bare_integers() -> None:
    assert parse_script("'01001'= 5;'01002'=+6;'01003'=-2;") == {"01002": 6, "01003": -2}


def test_unterminated_final_entry_yields_nothing() -> None:
    assert parse_script("'01001'=5;'01002'=3") == {"01001": 5}


def test_last_occurrence_wins() -> None:
    assert parse_script("'01001'=5;'01001'=8;") == {"01001": 8}


def test_empty_and_quote_free_input() -> None:
    assert parse_script("") == {}
    assert parse_script("var arr = new Array();") == {}


def test_scans_assignments_embedded_in_script() -> None:
    blob = (
        "<script>\n"
        "var arrMun = new Array();\n"
        "arrMun['01001']=120;\n"
        "arrMun['02004']= new Array();\n"
        "arrMun['09007']=3401;\n"
        "$('body').append(arrMun);\n"
        "arrMun['14039']=88;\n"
        "</script>"
    )
    assert parse_script(blob) == {"01001": 120, "09007": 3401}


def test_parse_base10_rejects_loose_integer_forms() -> None:
    assert parse_base10("-12") == -12
    for expr in (" 5", "1_000", "٥", ""):
        with pytest.raises(ValueError):
            parse_base10(expr)
