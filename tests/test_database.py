import io

import numpy as np
import pytest

from cadb.errors import DatabaseError
from cadb.model.state import DistanceRecord
from cadb.services.database import (
    DatabaseReader,
    open_database,
    parse_record,
    write_header,
    write_record,
)


def test_header_then_records_stream_in_order() -> None:
    text = (
        "!PDBDIR /data/pdb\n"
        "!NDIST  2\n"
        "!DATE   Mon Oct  5 10:00:00 1998\n"
        "\n"
        "# comment\n"
        "1abc.A.1 1.00 2.00 -1.00 -1.00\n"
        "\n"
        "1abc.A.2 1.00 -1.00 1.00 -1.00\n"
    )

    reader = DatabaseReader(io.StringIO(text))

    assert reader.ndist == 2
    assert reader.header.fields["PDBDIR"] == "/data/pdb"
    records = list(reader)
    assert [r.identifier for r in records] == ["1abc.A.1", "1abc.A.2"]
    assert list(records[0].forward) == [1.0, 2.0]
    assert list(records[1].backward) == [1.0, -1.0]
    assert reader.skipped == 0


def test_malformed_records_are_skipped() -> None:
    text = (
        "!NDIST 2\n"
        "1abc.A.1 1.00 2.00 -1.00\n"
        "1abc.A.2 1.00 x.xx 1.00 -1.00\n"
        "1abc.A.3 1.00 2.00 1.00 -1.00\n"
    )

    reader = DatabaseReader(io.StringIO(text))
    records = list(reader)

    assert [r.identifier for r in records] == ["1abc.A.3"]
    assert reader.skipped == 2


def test_missing_ndist_is_an_error() -> None:
    with pytest.raises(DatabaseError) as info:
        DatabaseReader(io.StringIO("!PDBDIR x\n1abc.A.1 1.00 -1.00\n!NDIST 1\n"))
    assert info.value.code == "missing_ndist"


def test_bad_ndist_value() -> None:
    with pytest.raises(DatabaseError, match="NDIST"):
        DatabaseReader(io.StringIO("!NDIST zero\n"))


def test_parse_record_requires_exact_width() -> None:
    record = parse_record("1abc.-.5A 1.5 2.5", 1)
    assert record.identifier == "1abc.-.5A"
    assert record.prefix == "1abc.-"
    with pytest.raises(ValueError):
        parse_record("1abc.-.5A 1.5 2.5 3.5", 1)


def test_written_database_reads_back(tmp_path) -> None:
    path = tmp_path / "test.cadb"
    original = [
        DistanceRecord("1abc.A.1", np.array([1.234, -1.0])),
        DistanceRecord("1abc.A.2", np.array([-1.0, 1.234])),
    ]
    with open(path, "w", encoding="utf-8") as handle:
        write_header(handle, "/pdb", 1, timestamp="now")
        for record in original:
            write_record(handle, record)

    with open_database(str(path)) as reader:
        records = list(reader)

    assert [r.identifier for r in records] == ["1abc.A.1", "1abc.A.2"]
    for ours, theirs in zip(records, original):
        assert list(ours.distances) == pytest.approx(list(theirs.distances), abs=0.005)


def test_open_database_missing_file(tmp_path) -> None:
    with pytest.raises(DatabaseError) as info:
        open_database(str(tmp_path / "missing.cadb"))
    assert info.value.code == "file_not_found"


def test_ndist_glued_to_its_key() -> None:
    reader = DatabaseReader(io.StringIO("!NDIST20\n!PDBDIR /pdb\n"))
    assert reader.ndist == 20
    assert reader.header.fields["NDIST"] == "20"
