r"""
AMOEBA Fragment Writer Module.

Writes a built atom collection as a Tinker XYZ fragment (.txyz):

    <n_atoms>\t<file name>
    <id>\t<element>\t<x>\t<y>\t<z>\t<amoeba type>\t<bonded id>\t...

and can reload a written fragment with MDAnalysis to check it.
"""
import os
from pathlib import Path
from typing import Dict, Any, List

import MDAnalysis as mda


class TxyzWriter:
    """Writes AMOEBA fragment files from a built atom collection."""

    def __init__(self, atoms: Dict[int, Dict[str, Any]]):
        self.atoms = atoms

    def write_fragment(self, out_path: str):
        """Writes the fragment, creating the parent directory when needed."""
        lines = self._format_lines(Path(out_path).name)
        os.makedirs(Path(out_path).parent, exist_ok=True)
        with open(out_path, 'w') as f:
            f.write("\n".join(lines) + "\n")

    def _format_lines(self, name: str) -> List[str]:
        n_atoms = len(self.atoms)
        lines = [f"{n_atoms}\t{name}"]
        for i in range(1, n_atoms + 1):
            atom = self.atoms.get(i)
            if atom is None:
                raise ValueError(f"Atom numbering is not contiguous: atom {i} of {n_atoms} is missing.")
            if atom['type'] is None:
                raise ValueError(f"Atom {i} has no AMOEBA type assigned.")
            x, y, z = atom['pos']
            fields = [str(i), atom['element'], f"{x:.6f}", f"{y:.6f}", f"{z:.6f}", str(atom['type'])]
            fields.extend(str(b) for b in sorted(atom['bonds']))
            lines.append("\t".join(fields))
        return lines


def verify_fragment(out_path: str, atoms: Dict[int, Dict[str, Any]]):
    """
    Reloads a written fragment with MDAnalysis and compares it to the atoms it
    was written from.

    Raises:
        ValueError: if the atom or bond counts disagree.
    """
    universe = mda.Universe(str(out_path), topology_format='TXYZ', format='TXYZ')
    if universe.atoms.n_atoms != len(atoms):
        raise ValueError(
            f"Atom count mismatch: {out_path} has {universe.atoms.n_atoms}, "
            f"expected {len(atoms)}."
        )

    n_bonds = sum(len(atom['bonds']) for atom in atoms.values()) // 2
    if len(universe.bonds) != n_bonds:
        raise ValueError(
            f"Bond count mismatch: {out_path} has {len(universe.bonds)}, expected {n_bonds}."
        )
