#!/usr/bin/env python3
"""Build a seeded DuckDB database from the catalog CSV files.

Run this once after updating the catalog, or in CI/CD.
The resulting .duckdb file is what DATABASE_PATH points the API at.

Usage:
    python backend/scripts/build_duckdb.py [catalog_dir] [output_path]

Default catalog_dir: data/catalog (relative to repo root)
Default output_path: data/fantasy_cricket.duckdb
"""
import sys
from pathlib import Path

from fantasy_cricket.repositories.catalog_loader import load_catalog
from fantasy_cricket.repositories.duckdb_repository import DuckDBRepository


def build_duckdb(catalog_dir: Path, output_path: Path) -> Path:
    """Create a fresh database at output_path seeded from catalog_dir.

    Returns:
        Path to the created database file
    """
    # Remove old DB if exists
    if output_path.exists():
        output_path.unlink()
        print(f"Removed existing {output_path}")

    repository = DuckDBRepository(str(output_path))
    try:
        summary = load_catalog(repository, catalog_dir)
    finally:
        repository.close()

    print(f"Building {output_path} from {catalog_dir}...")
    print(f"  ✓ teams: {summary.teams:,} rows")
    print(f"  ✓ players: {summary.players:,} rows")
    print(f"  ✓ fixtures: {summary.fixtures:,} rows")
    print(f"  ✓ leagues: {summary.leagues:,} rows")
    return output_path


def main():
    # backend/scripts -> backend -> repo root
    repo_root = Path(__file__).parent.parent.parent
    catalog_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else repo_root / "data" / "catalog"
    output_path = Path(sys.argv[2]) if len(sys.argv) > 2 else repo_root / "data" / "fantasy_cricket.duckdb"

    if not catalog_dir.exists():
        print(f"Error: Catalog path not found: {catalog_dir}")
        sys.exit(1)

    db_path = build_duckdb(catalog_dir, output_path)
    print(f"\nDone! Database ready at: {db_path}")


if __name__ == "__main__":
    main()
