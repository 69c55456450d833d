import io

import pytest

from anomalica import EmptyInputError, ColumnNotFoundError
from anomalica.types import DataKind
from anomalica.tabular import Field, Schema, ReaderOptions, infer_schema
from .constants import SENSORS_CSV, MIXED_CSV, numbered_csv


# tests for Schema

def test_schema_from_mapping():
    schema = Schema.from_mapping({"a": "int32", "b": DataKind.TEXT})
    assert schema.names == ["a", "b"]
    assert schema.field(0).kind is DataKind.INT32
    assert schema.index("b") == 1
    assert "a" in schema and "z" not in schema
    assert schema.to_dict() == {"a": "int32", "b": "text"}

def test_schema_index_missing_column():
    schema = Schema.from_mapping({"a": "int64"})
    with pytest.raises(ColumnNotFoundError, match="Column 'z' not found") as e:
        schema.index("z")
    assert e.value.column == "z"
    assert isinstance(e.value, KeyError)

def test_schema_rejects_duplicates():
    with pytest.raises(ValueError, match="duplicate"):
        Schema([Field("a", "int64"), Field("a", "float64")])

def test_field_rejects_unknown_kind():
    with pytest.raises(ValueError, match="Unsupported method 'bool'"):
        Field("a", "bool")

def test_schema_equality_and_hash():
    s1 = Schema.from_mapping({"a": "int64"})
    s2 = Schema.from_mapping({"a": DataKind.INT64})
    assert s1 == s2
    assert hash(s1) == hash(s2)

# tests for infer_schema()

def test_infer_schema_deterministic():
    schema = infer_schema(io.StringIO(MIXED_CSV))
    assert schema.to_dict() == {"id": "int64", "value": "int64", "ratio": "float64",
                                "label": "text", "empty": "float64"}

def test_infer_schema_skips_comments_and_nulls():
    schema = infer_schema(io.StringIO(SENSORS_CSV))
    assert schema.to_dict() == {"temperature": "float64", "humidity": "int64",
                                "site": "text"}

def test_infer_schema_trims_header_names():
    schema = infer_schema(io.StringIO(" a , b \n1,2\n"))
    assert schema.names == ["a", "b"]

def test_infer_schema_int64_overflow_is_float():
    schema = infer_schema(io.StringIO("x\n1\n99999999999999999999\n"))
    assert schema.field(0).kind is DataKind.FLOAT64

def test_infer_schema_sample_window():
    text = numbered_csv(10) + "oops\n"
    assert infer_schema(io.StringIO(text), sample_rows=5).field(0).kind is DataKind.INT64
    assert infer_schema(io.StringIO(text)).field(0).kind is DataKind.TEXT

def test_infer_schema_custom_null_token():
    text = "x\n1\n-\n2\n"
    assert infer_schema(io.StringIO(text)).field(0).kind is DataKind.TEXT
    options = ReaderOptions(null_values=["-"])
    assert infer_schema(io.StringIO(text), options=options).field(0).kind is DataKind.INT64

def test_infer_schema_without_header():
    options = ReaderOptions(has_header=False, delimiter=";")
    schema = infer_schema(io.StringIO("1;a\n2;b\n"), options=options)
    assert schema.to_dict() == {"f0": "int64", "f1": "text"}

def test_infer_schema_from_path(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text(MIXED_CSV)
    assert infer_schema(path) == infer_schema(io.StringIO(MIXED_CSV))

def test_infer_schema_consumes_stream():
    stream = io.StringIO(numbered_csv(3))
    infer_schema(stream)
    assert stream.read() == ""

@pytest.mark.parametrize("text", ["", "# only a comment\n", "a,b\n", "a,b\n# c\n\n"])
def test_infer_schema_empty_input(text):
    with pytest.raises(EmptyInputError):
        infer_schema(io.StringIO(text))

@pytest.mark.parametrize("header", ["a,a\n", "a,,c\n"])
def test_infer_schema_bad_header(header):
    with pytest.raises(ValueError):
        infer_schema(io.StringIO(header + "1,2,3\n"))

def test_infer_schema_invalid_sample_rows():
    with pytest.raises(ValueError, match="sample_rows"):
        infer_schema(io.StringIO("a\n1\n"), sample_rows=0)
