"""
CHARMM Structure Parser Module.

This module reads the two halves of a CHARMM structure:
- the coordinate file (.pdb), giving one record per atom with its CHARMM
  type, residue membership and position;
- the topology file (.psf), from which only the bond list is used.

Both formats are read by whitespace tokenization rather than fixed columns.
"""

import os
from collections import defaultdict
from enum import Enum
from typing import Dict, Any, List, Set

ATOM_RECORD = 'ATOM'
POTASSIUM_ID = 'POT'
BOND_SECTION_MARKER = '!NBOND:'


class PdbParser:
    """Parses a CHARMM PDB file into a map of atom index -> atom record."""

    def __init__(self, pdb_file: str):
        """
        Initializes the parser.

        Args:
            pdb_file: Path to the CHARMM coordinate file.
        """
        if not os.path.exists(pdb_file):
            raise FileNotFoundError(f"PDB file not found: {pdb_file}")
        self.pdb_file = pdb_file

    def parse(self) -> Dict[int, Dict[str, Any]]:
        """
        Reads every ATOM record of the file.

        A line counts as an atom record only when it splits into more than
        10 tokens and the first token is ATOM. Everything else (headers,
        REMARK, END, truncated records) is skipped.

        Returns:
            Atom index -> atom record, with empty bonds and no type yet.
        """
        atoms: Dict[int, Dict[str, Any]] = {}
        with open(self.pdb_file, 'r') as f:
            for line_num, line in enumerate(f, start=1):
                tokens = line.split()
                if len(tokens) > 10 and tokens[0] == ATOM_RECORD:
                    atom = self._parse_atom(tokens, line_num)
                    atoms[atom['id']] = atom
        return atoms

    def _parse_atom(self, tokens: List[str], line_num: int) -> Dict[str, Any]:
        try:
            atom_id = int(tokens[1])
            mol_id = int(tokens[4])
            pos = (float(tokens[5]), float(tokens[6]), float(tokens[7]))
        except ValueError as e:
            raise ValueError(
                f"Malformed ATOM record in {self.pdb_file} on line {line_num}: {e}"
            ) from e

        charmm_type = tokens[2]
        element = 'K' if charmm_type == POTASSIUM_ID else charmm_type[0]
        return {
            'id': atom_id,
            'element': element,
            'type': None,
            'bonds': set(),
            'pos': pos,
            'charmm_type': charmm_type,
            'mol_type': tokens[3],
            'mol_id': mol_id,
        }


class PsfState(Enum):
    OUTSIDE_BONDS = 0
    INSIDE_BONDS = 1


class PsfParser:
    """Parses the bond section of a CHARMM PSF file into a symmetric adjacency map."""

    def __init__(self, psf_file: str):
        """
        Initializes the parser.

        Args:
            psf_file: Path to the CHARMM topology file.
        """
        if not os.path.exists(psf_file):
            raise FileNotFoundError(f"PSF file not found: {psf_file}")
        self.psf_file = psf_file

    def parse(self) -> Dict[int, Set[int]]:
        """
        Collects the bonds listed under the !NBOND: section header.

        Section headers in a PSF are 3-token lines ("<count> !NAME: <title>").
        The one naming !NBOND: opens the bond section and any other 3-token
        line closes it. A line is read in the state it was reached in, so
        the header line itself never contributes bonds.

        Returns:
            Atom index -> set of bonded atom indices.
        """
        bonds: Dict[int, Set[int]] = defaultdict(set)
        state = PsfState.OUTSIDE_BONDS

        with open(self.psf_file, 'r') as f:
            for line in f:
                tokens = line.split()
                if state is PsfState.INSIDE_BONDS:
                    self._add_bond_pairs(tokens, bonds)
                if len(tokens) == 3:
                    state = self._next_state(tokens)

        return dict(bonds)

    @staticmethod
    def _next_state(tokens: List[str]) -> PsfState:
        if tokens[1] == BOND_SECTION_MARKER:
            return PsfState.INSIDE_BONDS
        return PsfState.OUTSIDE_BONDS

    @staticmethod
    def _add_bond_pairs(tokens: List[str], bonds: Dict[int, Set[int]]):
        """Adds each (even, odd) token pair of a bond line in both directions."""
        for i in range(0, len(tokens) - 1, 2):
            try:
                atom1, atom2 = int(tokens[i]), int(tokens[i + 1])
            except ValueError:
                continue
            bonds[atom1].add(atom2)
            bonds[atom2].add(atom1)
