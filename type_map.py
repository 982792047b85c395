"""
CHARMM to AMOEBA Type Map Module.

Reads the two-column vocabulary table that relates CHARMM atom types to
AMOEBA atom types. The table is loaded once per batch and handed to every
conversion as a read-only view.
"""
import os
from types import MappingProxyType
from typing import Dict, Mapping


def load_type_map(path: str) -> Dict[str, str]:
    """
    Loads the CHARMM to AMOEBA type table.

    Each line holding at least two whitespace-separated tokens maps the first
    token to the second; anything after the second token is ignored. Shorter
    lines are skipped and a repeated CHARMM type keeps its last value.

    Args:
        path: Path to the type conversion table.

    Returns:
        A dictionary of CHARMM type -> AMOEBA type (still a string).
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"CHARMM to AMOEBA type conversion file not found: {path}")

    print(f"  -> Reading type map: {os.path.basename(path)}")
    charmm2amoeba = {}
    with open(path, 'r') as f:
        for line in f:
            tokens = line.split()
            if len(tokens) > 1:
                charmm2amoeba[tokens[0]] = tokens[1]
    return charmm2amoeba


def freeze_type_map(type_map: Mapping[str, str]) -> Mapping[str, str]:
    """Wraps a type map in a read-only view for sharing between threads."""
    if isinstance(type_map, MappingProxyType):
        return type_map
    return MappingProxyType(dict(type_map))
