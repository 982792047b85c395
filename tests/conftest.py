import pytest


def _pdb_line(atom_id, charmm_type, mol_type, mol_id, pos):
    x, y, z = pos
    return (f"ATOM  {atom_id:5d}  {charmm_type:<4s}{mol_type:<4s} {mol_id:4d}    "
            f"{x:8.3f}{y:8.3f}{z:8.3f}  1.00  0.00      MEMB\n")


def _psf_text(bonds):
    lines = [
        "PSF EXT\n",
        "\n",
        "         1 !NTITLE\n",
        "* test structure\n",
        "\n",
        "         2 !NATOM\n",
        "\n",
        f"{len(bonds):10d} !NBOND: bonds\n",
    ]
    flat = [str(a) for pair in bonds for a in pair]
    for i in range(0, len(flat), 8):
        lines.append("  ".join(flat[i:i + 8]) + "\n")
    lines.extend(["\n", "         0 !NTHETA: angles\n", "\n"])
    return "".join(lines)


@pytest.fixture
def write_pdb():
    """Writes a CHARMM PDB from (id, charmm_type, mol_type, mol_id, (x, y, z)) tuples."""
    def _write(path, records):
        with open(path, 'w') as f:
            f.write("REMARK generated for tests\n")
            f.write("CRYST1   60.000   60.000   80.000  90.00  90.00  90.00 P 1           1\n")
            for record in records:
                f.write(_pdb_line(*record))
            f.write("END\n")
        return str(path)
    return _write


@pytest.fixture
def write_psf():
    """Writes a CHARMM PSF whose bond section holds the given pairs."""
    def _write(path, bonds):
        with open(path, 'w') as f:
            f.write(_psf_text(bonds))
        return str(path)
    return _write


@pytest.fixture
def water_records():
    return [
        (1, 'HT', 'TIP3', 1, (0.0, 0.0, 0.0)),
        (2, 'OT', 'TIP3', 1, (1.0, 0.0, 0.0)),
    ]


@pytest.fixture
def type_map():
    return {'HT': '1', 'OT': '2', 'POT': '7', 'CLA': '8'}
