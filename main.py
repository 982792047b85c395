"""
Main executable script for the CHARMM to AMOEBA bilayer converter.

This script orchestrates the conversion process by:
1. Parsing command-line arguments for the type map and input/output folders.
2. Loading the CHARMM to AMOEBA atom type map.
3. Converting every .pdb/.psf pair of the input folder to a .txyz fragment.
4. Reporting the outcome of each conversion and the total runtime.
"""

import argparse
import os
import sys
import time
from typing import Optional

from batch_converter import convert_batch
from type_map import load_type_map


def main(type_map_file: str, in_folder: str, out_folder: Optional[str] = None,
         workers: Optional[int] = None, strict: bool = False, verify: bool = False) -> int:
    """Main function to run the conversion. Returns the process exit status."""
    start = time.perf_counter()
    print("=====================================================")
    print("=== CHARMM to AMOEBA Bilayer Conversion Script    ===")
    print("=====================================================\n")

    # --- 1. Type map ---
    print("\n--- [Step 1/3] Reading CHARMM to AMOEBA atom type map ---")
    try:
        charmm2amoeba = load_type_map(type_map_file)
    except OSError as e:
        print(f"Failed to read type map '{type_map_file}': {e}")
        return 1
    print(f"Loaded {len(charmm2amoeba)} atom types.")

    # --- 2. Batch conversion ---
    print("\n--- [Step 2/3] Batch converting bilayers ---")
    if out_folder is None:
        out_folder = os.path.join(in_folder, 'amoeba')
    try:
        results = convert_batch(in_folder, out_folder, charmm2amoeba,
                                max_workers=workers, strict=strict, verify=verify)
    except Exception as e:
        print(f"Conversion aborted: {e}")
        return 1

    # --- 3. Summary ---
    print("\n--- [Step 3/3] Conversion summary ---")
    failed = [r for r in results if not r.ok]
    print(f"Converted {len(results) - len(failed)} of {len(results)} bilayers into '{out_folder}'.")
    for result in failed:
        print(f"  - {result.pdb_file}: {result.error}")

    duration_ms = int((time.perf_counter() - start) * 1000)
    print(f"Total Runtime = {duration_ms} ms.")
    print("\n=====================================================")
    return 1 if failed else 0


def cli():
    cli_parser = argparse.ArgumentParser(
        description="Convert CHARMM bilayers (.pdb + .psf) to AMOEBA fragments (.txyz).",
        formatter_class=argparse.RawTextHelpFormatter
    )
    cli_parser.add_argument(
        "type_map",
        help="Path to the CHARMM to AMOEBA type conversion table."
    )
    cli_parser.add_argument(
        "input",
        help="Folder holding the CHARMM .pdb/.psf pairs."
    )
    cli_parser.add_argument(
        "-o", "--output",
        default=None,
        help="Path for the output folder. Defaults to an 'amoeba' folder inside the input folder."
    )
    cli_parser.add_argument(
        "-j", "--workers",
        type=int,
        default=None,
        help="Maximum number of bilayers converted at the same time."
    )
    cli_parser.add_argument(
        "--strict",
        action="store_true",
        help="Abort with the first failed conversion instead of reporting it in the summary."
    )
    cli_parser.add_argument(
        "--verify",
        action="store_true",
        help="Reload every written fragment with MDAnalysis and check atom and bond counts."
    )

    args = cli_parser.parse_args()
    sys.exit(main(type_map_file=args.type_map, in_folder=args.input, out_folder=args.output,
                  workers=args.workers, strict=args.strict, verify=args.verify))


if __name__ == '__main__':
    cli()
