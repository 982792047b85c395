"""
AMOEBA Fragment Builder Module.

This module merges the CHARMM coordinate records with the PSF bond list and
turns them into atoms ready to be written as an AMOEBA fragment.

Key functionalities:
- Attaches the PSF bonds to the atom records.
- Cuts the spurious H-H bonds CHARMM water models carry.
- Marks unbonded ions with their charge (K+, Cl-, ...).
- Assigns integer AMOEBA types through the CHARMM to AMOEBA type map.
"""
from typing import Dict, Any, Mapping, Set

from charmm_parser import POTASSIUM_ID

CATIONS = {'K', 'Na', 'Li', 'H'}
ANIONS = {'Cl', 'F', 'Br', 'I'}


class FragmentBuilder:
    """Builds the AMOEBA atom collection for one structure."""

    def __init__(self, atoms: Dict[int, Dict[str, Any]], bonds: Dict[int, Set[int]],
                 type_map: Mapping[str, str]):
        """
        Initializes the builder.

        Args:
            atoms: Atom records produced by PdbParser. Modified in place.
            bonds: Adjacency produced by PsfParser.
            type_map: CHARMM type -> AMOEBA type table.
        """
        self.atoms = atoms
        self.bonds = bonds
        self.type_map = type_map

    def build(self) -> Dict[int, Dict[str, Any]]:
        """
        Runs every pass over the atoms, in order.

        Returns:
            The same atom map that was passed in, now fully typed.
        """
        self._merge_bonds()
        self._disconnect_hydrogens()
        self._rename_potassium()
        self._mark_ions()
        self._assign_amoeba_types()
        return self.atoms

    def _merge_bonds(self):
        for atom_id, bonded in self.bonds.items():
            if atom_id not in self.atoms:
                raise KeyError(f"Bonded atom {atom_id} has no ATOM record in the coordinate file.")
            self.atoms[atom_id]['bonds'] = set(bonded)

    def _disconnect_hydrogens(self):
        """Removes every H-H bond (water hydrogens are cross-bonded in CHARMM PSFs)."""
        for atom_id, atom in self.atoms.items():
            if atom['element'] != 'H':
                continue
            for other_id in sorted(atom['bonds']):
                if atom_id < other_id and self.atoms[other_id]['element'] == 'H':
                    self._disconnect(atom_id, other_id)

    def _disconnect(self, atom1: int, atom2: int):
        self.atoms[atom1]['bonds'].discard(atom2)
        self.atoms[atom2]['bonds'].discard(atom1)

    def _rename_potassium(self):
        for atom in self.atoms.values():
            if atom['element'] == POTASSIUM_ID:
                atom['element'] = 'K'

    def _mark_ions(self):
        """Appends a charge to atoms left without any bond."""
        for atom in self.atoms.values():
            if atom['bonds']:
                continue
            if atom['element'] in CATIONS:
                atom['element'] += '+'
            elif atom['element'] in ANIONS:
                atom['element'] += '-'

    def _assign_amoeba_types(self):
        for atom in self.atoms.values():
            charmm_type = atom['charmm_type']
            if charmm_type not in self.type_map:
                raise KeyError(f"No AMOEBA type for CHARMM type '{charmm_type}' (atom {atom['id']}).")
            amoeba_type = self.type_map[charmm_type]
            try:
                atom['type'] = int(amoeba_type)
            except ValueError as e:
                raise ValueError(
                    f"AMOEBA type '{amoeba_type}' for CHARMM type '{charmm_type}' is not an integer."
                ) from e
