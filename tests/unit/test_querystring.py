# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from fetchhelper.querystring import stringify


def test_default_sorts_keys_and_duplicates_array_keys():
    assert stringify({"b": 2, "a": [1, 2]}) == "a=1&a=2&b=2"


def test_bracket_index_and_comma_formats():
    assert stringify({"a": [1, 2]}, array_format="bracket") == "a[]=1&a[]=2"
    assert stringify({"a b": ["x y"]}, array_format="bracket", encode=False) == "a b[]=x y"
    assert stringify({"a": [1, 2]}, array_format="index", encode=False) == "a[0]=1&a[1]=2"
    assert stringify({"a": [1, 2, 3]}, array_format="comma") == "a=1,2,3"


def test_separator_formats():
    assert stringify({"a": [1, 2]}, array_format="separator", array_format_separator="|") == "a=1|2"
    assert (
        stringify({"a": [1, 2]}, array_format="bracket-separator", array_format_separator="|", encode=False)
        == "a[]=1|2"
    )
    assert stringify({"a": []}, array_format="bracket-separator", encode=False) == "a[]"


def test_default_sort_handles_mixed_key_types():
    assert stringify({"b": 2, 1: "a", "a": None}) == "1=a&a&b=2"


def test_sort_disabled_and_custom_comparator():
    params = {"b": 1, "c": 2, "a": 3}
    assert stringify(params, sort=False) == "b=1&c=2&a=3"

    def reverse(left, right):
        return (left < right) - (left > right)

    assert stringify(params, sort=reverse) == "c=2&b=1&a=3"


def test_strict_encoding_escapes_reserved_marks():
    assert stringify({"q": "it's (ok)!*"}) == "q=it%27s%20%28ok%29%21%2A"
    assert stringify({"q": "it's (ok)!*"}, strict=False) == "q=it's%20(ok)!*"
    assert stringify({"name": "ä&b"}) == "name=%C3%A4%26b"


def test_null_and_empty_string_handling():
    params = {"a": None, "b": "", "c": "x"}
    assert stringify(params) == "a&b=&c=x"
    assert stringify(params, skip_null=True) == "b=&c=x"
    assert stringify(params, skip_empty_string=True) == "a&c=x"
    assert stringify({"a": [1, None, 2]}, skip_null=True) == "a=1&a=2"
    assert stringify({"a": [None]}, array_format="bracket", encode=False) == "a[]"


def test_booleans_and_empty_inputs():
    assert stringify({"flag": True, "off": False}) == "flag=true&off=false"
    assert stringify({}) == ""
    assert stringify(None) == ""


def test_unknown_array_format_rejected():
    with pytest.raises(ValueError):
        stringify({"a": [1]}, array_format="weird")
