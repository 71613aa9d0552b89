from email import policy
from email.parser import BytesParser
from urllib.parse import parse_qsl

import pytest

from curlkit.form import (
    encode_multipart_form,
    encode_multipart_form_values,
    encode_url_form,
    encode_url_form_values,
    has_file,
)
from curlkit.types import FormFile, FormValue


def _parts(body, content_type):
    raw = b"Content-Type: " + content_type.encode() + b"\r\n\r\n" + body
    message = BytesParser(policy=policy.default).parsebytes(raw)
    return [
        (
            part.get_param("name", header="content-disposition"),
            part.get_filename(),
            part.get_payload(decode=True),
        )
        for part in message.iter_parts()
    ]


def _boundary(content_type):
    return content_type.split("boundary=", 1)[1]


def test_url_values_scalars_and_int_list():
    encoded = encode_url_form_values({"name": "go", "ids": [1, 2]})
    assert "name=go" in encoded
    assert "ids%5B%5D=1" in encoded
    assert parse_qsl(encoded) == [("ids[]", "1"), ("ids[]", "2"), ("name", "go")]


def test_url_values_sorted_by_key_with_stable_value_order():
    encoded = encode_url_form_values({"b": "x", "a": ["3", "1"]})
    assert parse_qsl(encoded) == [("a[]", "3"), ("a[]", "1"), ("b", "x")]


def test_url_values_nested_mapping_and_list_of_mappings():
    encoded = encode_url_form_values(
        {"user": {"id": 7, "role": "admin"}, "items": [{"sku": "a"}, {"sku": "b"}]}
    )
    assert parse_qsl(encoded) == [
        ("items[0][sku]", "a"),
        ("items[1][sku]", "b"),
        ("user[id]", "7"),
        ("user[role]", "admin"),
    ]


def test_url_values_skip_form_files():
    encoded = encode_url_form_values({"upload": FormFile(path="/tmp/x"), "k": "v"})
    assert parse_qsl(encoded) == [("k", "v")]


def test_url_values_escape_reserved_characters():
    encoded = encode_url_form_values({"q": "a b&c=d"})
    assert parse_qsl(encoded) == [("q", "a b&c=d")]
    assert " " not in encoded and "&c" not in encoded


def test_float_formatting():
    encoded = encode_url_form_values({"half": 1.5, "whole": 2.0, "big": 1e6})
    values = dict(parse_qsl(encoded))
    assert values["half"] == "1.5"
    assert values["whole"] == "2"
    assert values["big"] == "1e+06"


@pytest.mark.parametrize("value", [True, object(), b"raw", [1, "mixed"], None])
def test_url_values_reject_unsupported(value):
    with pytest.raises(TypeError, match="key bad"):
        encode_url_form_values({"bad": value})


def test_url_form_from_form_values():
    encoded = encode_url_form({"name": FormValue("go"), "ids": FormValue([1, 2])})
    assert parse_qsl(encoded) == [("ids[]", "1"), ("ids[]", "2"), ("name", "go")]


def test_url_form_rejects_list_of_mappings():
    with pytest.raises(TypeError, match="key rows"):
        encode_url_form({"rows": FormValue([{"a": 1}])})


def test_multipart_wire_format():
    body, content_type = encode_multipart_form_values({"name": "go"})
    boundary = _boundary(content_type)
    assert content_type.startswith("multipart/form-data; boundary=")
    assert body.startswith(
        f'--{boundary}\r\nContent-Disposition: form-data; name="name"\r\n\r\ngo'.encode()
    )
    assert body.endswith(f"\r\n--{boundary}--\r\n".encode())


def test_multipart_boundaries_differ_between_calls():
    _, first = encode_multipart_form_values({"a": "b"})
    _, second = encode_multipart_form_values({"a": "b"})
    assert _boundary(first) != _boundary(second)
    assert len(_boundary(first)) == len(_boundary(second))


def test_multipart_values_with_file(tmp_path):
    source = tmp_path / "upload.tmp"
    source.write_text("hello")
    form = {
        "file": FormFile(path=str(source), file_name="file.txt"),
        "tags": ["x", "y"],
        "meta": {"k": "v"},
    }
    body, content_type = encode_multipart_form_values(form)
    assert _parts(body, content_type) == [
        ("file", "file.txt", b"hello"),
        ("tags[]", None, b"x"),
        ("tags[]", None, b"y"),
        ("meta[k]", None, b"v"),
    ]


def test_multipart_file_defaults_to_key_and_base_name(tmp_path):
    source = tmp_path / "report.csv"
    source.write_bytes(b"a,b\n1,2\n")
    body, content_type = encode_multipart_form_values({"doc": FormFile(path=source)})
    assert _parts(body, content_type) == [("doc", "report.csv", b"a,b\n1,2\n")]


def test_multipart_file_explicit_field(tmp_path):
    source = tmp_path / "report.csv"
    source.write_bytes(b"data")
    upload = FormFile(path=source, field="attachment")
    body, content_type = encode_multipart_form_values({"doc": upload})
    assert _parts(body, content_type)[0][0] == "attachment"


def test_multipart_quotes_are_escaped():
    body, content_type = encode_multipart_form_values({'say "hi"': "x"})
    assert _parts(body, content_type) == [('say "hi"', None, b"x")]


def test_multipart_values_reject_int_lists():
    with pytest.raises(TypeError, match="key ids"):
        encode_multipart_form_values({"ids": [1, 2]})


def test_multipart_values_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        encode_multipart_form_values({"f": FormFile(path=tmp_path / "absent")})


def test_multipart_form_from_form_values(tmp_path):
    source = tmp_path / "payload.bin"
    source.write_bytes(b"\x00\x01")
    form = {
        "upload": FormValue(str(source), is_file=True, field_name="blob", file_name="p.bin"),
        "count": FormValue(3),
    }
    body, content_type = encode_multipart_form(form)
    assert _parts(body, content_type) == [("blob", "p.bin", b"\x00\x01"), ("count", None, b"3")]


def test_multipart_form_rejects_unsupported():
    with pytest.raises(TypeError, match="key flag"):
        encode_multipart_form({"flag": FormValue(False)})


def test_has_file_detects_both_kinds():
    assert has_file({"a": FormValue("x"), "b": FormValue("/p", is_file=True)}) is True
    assert has_file({"a": "x", "f": FormFile(path="/p")}) is True
    assert has_file({"a": FormValue("x"), "b": [1, 2]}) is False
    assert has_file({}) is False