from pathlib import Path

import pytest

from cadb.model.state import Residue

PDB_ATOM = "%-6s%5d  %-3s%1s%3s %1s%4d%1s   %8.3f%8.3f%8.3f%6.2f%6.2f          %2s\n"


def pdb_atom_line(
    serial,
    name,
    resname,
    chain,
    resnum,
    coords,
    icode=" ",
    altloc=" ",
    record="ATOM",
    element="C",
):
    x, y, z = coords
    return PDB_ATOM % (
        record,
        serial,
        name,
        altloc,
        resname,
        chain,
        resnum,
        icode,
        x,
        y,
        z,
        1.0,
        0.0,
        element,
    )


@pytest.fixture
def write_pdb(tmp_path):
    def _write(name: str, lines) -> Path:
        path = tmp_path / name
        path.write_text("".join(lines) + "END\n", encoding="utf-8")
        return path

    return _write


def make_chain(structure_id, chain, count, start=1, spacing=1.0):
    """Residues along the x axis, ``spacing`` apart."""
    return [
        Residue(
            structure_id=structure_id,
            chain=chain,
            resnum=start + idx,
            insert=" ",
            coords=(spacing * idx, 0.0, 0.0),
        )
        for idx in range(count)
    ]
