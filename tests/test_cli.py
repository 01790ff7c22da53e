import warnings

from cadb import config
from cadb.app import _parse_build_args, _parse_search_args, build_main, search_main
from cadb.logging_config import configure_logging
from conftest import pdb_atom_line


def test_parse_build_args_defaults() -> None:
    args = _parse_build_args(["makecadb", "pdbdir"])
    assert args.pdbdir == "pdbdir"
    assert args.outfile is None
    assert args.ndist == config.DEFAULT_NDIST
    assert args.limit == 0
    assert args.log_file is None


def test_parse_build_args_overrides() -> None:
    args = _parse_build_args(["makecadb", "-d", "8", "-l", "50", "pdbdir", "out.cadb"])
    assert args.ndist == 8
    assert args.limit == 50
    assert args.outfile == "out.cadb"


def test_parse_search_args_streams_default_to_std() -> None:
    args = _parse_search_args(["searchcadb"])
    assert args.infile is None
    assert args.outfile is None

    args = _parse_search_args(["searchcadb", "query.txt", "hits.txt", "--verbose"])
    assert args.infile == "query.txt"
    assert args.outfile == "hits.txt"
    assert args.verbose


def _colinear_pdb_dir(tmp_path, write_pdb):
    pdb_dir = tmp_path / "pdb"
    pdb_dir.mkdir()
    write_pdb(
        "pdb/1abc.pdb",
        [
            pdb_atom_line(idx + 1, "CA", "ALA", "A", idx + 1, (3.8 * idx, 0.0, 0.0))
            for idx in range(4)
        ],
    )
    return pdb_dir


def test_build_then_search_writes_survivors(tmp_path, write_pdb) -> None:
    pdb_dir = _colinear_pdb_dir(tmp_path, write_pdb)
    database = tmp_path / "test.cadb"
    control = tmp_path / "control.txt"
    hits = tmp_path / "hits.txt"

    assert build_main(["makecadb", "-d", "2", str(pdb_dir), str(database)]) == 0
    assert "!NDIST  2" in database.read_text(encoding="utf-8")

    control.write_text(
        f"DATABASE {database}\nLENGTH 2\nDP 1 3.7 3.9\nDM 2 7.5 7.7\nEND\n",
        encoding="utf-8",
    )
    assert search_main(["searchcadb", str(control), str(hits)]) == 0
    assert hits.read_text(encoding="utf-8").splitlines() == [
        "1abc.A.1",
        "1abc.A.2",
        "1abc.A.3",
    ]


def test_search_quit_prints_nothing_to_stdout(tmp_path, capsys) -> None:
    control = tmp_path / "control.txt"
    control.write_text("LENGTH 2\nQUIT\n", encoding="utf-8")

    assert search_main(["searchcadb", str(control)]) == 0
    assert capsys.readouterr().out == ""


def test_search_missing_control_file_exits_1(tmp_path, capsys) -> None:
    status = search_main(["searchcadb", str(tmp_path / "nope.txt")])

    assert status == 1
    assert "searchcadb:" in capsys.readouterr().err


def test_search_unwritable_results_file_exits_1(tmp_path, capsys) -> None:
    control = tmp_path / "control.txt"
    control.write_text("QUIT\n", encoding="utf-8")

    status = search_main(["searchcadb", str(control), str(tmp_path / "no" / "hits.txt")])

    assert status == 1
    assert "searchcadb:" in capsys.readouterr().err


def test_build_missing_directory_exits_1(tmp_path, capsys) -> None:
    status = build_main(["makecadb", str(tmp_path / "missing"), str(tmp_path / "out.cadb")])

    assert status == 1
    assert "makecadb:" in capsys.readouterr().err
    assert (tmp_path / "out.cadb").read_text(encoding="utf-8") == ""


def test_build_unwritable_output_exits_1(tmp_path, write_pdb, capsys) -> None:
    pdb_dir = _colinear_pdb_dir(tmp_path, write_pdb)

    status = build_main(["makecadb", str(pdb_dir), str(tmp_path / "no" / "out.cadb")])

    assert status == 1
    assert "makecadb:" in capsys.readouterr().err


def test_pdb_warning_filters_name_their_messages() -> None:
    with warnings.catch_warnings():
        configure_logging(None)
        pdb_filters = [
            entry
            for entry in warnings.filters
            if entry[3] is not None and "PDBParser" in entry[3].pattern
        ]
    assert pdb_filters
    assert all(entry[1] is not None and entry[1].pattern for entry in pdb_filters)
