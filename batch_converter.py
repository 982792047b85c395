"""
Batch Conversion Module.

Converts every CHARMM bilayer (.pdb + .psf pair) found in a directory into an
AMOEBA fragment, one conversion per thread. The type map is the only thing
the conversions share and it is handed to them as a read-only view.
"""
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Mapping, NamedTuple, Optional

from tqdm import tqdm

from charmm_parser import PdbParser, PsfParser
from fragment_builder import FragmentBuilder
from txyz_writer import TxyzWriter, verify_fragment
from type_map import freeze_type_map


class ConversionResult(NamedTuple):
    pdb_file: str
    psf_file: str
    out_file: str
    n_atoms: int = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def convert_single(pdb_file: str, psf_file: str, out_file: str,
                   type_map: Mapping[str, str], verify: bool = False) -> int:
    """
    Converts one CHARMM structure to an AMOEBA fragment.

    Returns:
        The number of atoms written.
    """
    atoms = PdbParser(pdb_file).parse()
    bonds = PsfParser(psf_file).parse()
    atoms = FragmentBuilder(atoms, bonds, type_map).build()

    TxyzWriter(atoms).write_fragment(out_file)
    if verify:
        verify_fragment(out_file, atoms)
    return len(atoms)


def find_structure_pairs(in_dir: str, out_dir: str, coord_ext: str = '.pdb',
                         topo_ext: str = '.psf', out_ext: str = '.txyz') -> List[tuple]:
    """
    Lists the (pdb, psf, output) paths for every coordinate file in in_dir.

    The base name is everything before the first '.' of the file name, so
    'bilayer.run1.pdb' pairs with 'bilayer.psf'. The psf is not checked for
    existence here; a missing one fails its own conversion.
    """
    if not os.path.isdir(in_dir):
        raise FileNotFoundError(f"Input directory not found: {in_dir}")

    pairs = []
    for name in sorted(os.listdir(in_dir)):
        if Path(name).suffix != coord_ext:
            continue
        base_name = name.split('.')[0]
        pairs.append((
            os.path.join(in_dir, name),
            os.path.join(in_dir, base_name + topo_ext),
            os.path.join(out_dir, base_name + out_ext),
        ))
    return pairs


def convert_batch(in_dir: str, out_dir: str, type_map: Mapping[str, str],
                  max_workers: Optional[int] = None, strict: bool = False,
                  verify: bool = False, **kwargs) -> List[ConversionResult]:
    """
    Converts all structure pairs of in_dir concurrently into out_dir.

    Args:
        in_dir: Directory holding the .pdb/.psf pairs.
        out_dir: Directory receiving the .txyz fragments, created if absent.
        type_map: CHARMM type -> AMOEBA type table.
        max_workers: Upper bound on concurrent conversions.
        strict: Re-raise the first failure once every conversion has finished.
        verify: Reload each written fragment with MDAnalysis to check it.
        **kwargs: coord_ext, topo_ext and out_ext override the file extensions.

    Returns:
        One ConversionResult per pair, in input file order.
    """
    pairs = find_structure_pairs(in_dir, out_dir, **kwargs)
    os.makedirs(out_dir, exist_ok=True)
    shared_map = freeze_type_map(type_map)

    print(f"  -> Found {len(pairs)} structures in {in_dir}")
    results = {}
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            pool.submit(convert_single, pdb, psf, out, shared_map, verify): (pdb, psf, out)
            for pdb, psf, out in pairs
        }
        for future in tqdm(as_completed(futures), total=len(futures), desc="Structures converted"):
            pdb, psf, out = futures[future]
            try:
                results[pdb] = ConversionResult(pdb, psf, out, n_atoms=future.result())
            except Exception as e:
                tqdm.write(f"    -> FAILED {os.path.basename(pdb)}: {e}")
                results[pdb] = ConversionResult(pdb, psf, out, error=e)

    ordered = [results[pdb] for pdb, _, _ in pairs]
    if strict:
        for result in ordered:
            if not result.ok:
                raise result.error
    return ordered
