"""
Output generation for coordinate results.
"""

from pathlib import Path
from typing import Optional, Sequence
import logging

import pandas as pd

from ..core.ranges import BatchResult

logger = logging.getLogger(__name__)

RANGE_COLUMNS = ['chr', 'start', 'end', 'strand', 'width']


def ranges_to_frame(
    ranges,
    region: Optional[str] = None,
) -> pd.DataFrame:
    """
    Convert GenomicRanges (or a BatchResult) to a DataFrame.

    Failed anchors of a BatchResult appear as rows with missing coordinates
    and the error message in an 'error' column.
    """
    errors = {}
    if isinstance(ranges, BatchResult):
        errors = ranges.errors
        ranges = ranges.values

    rows = []
    for i, r in enumerate(ranges):
        if r is None:
            row = {c: None for c in RANGE_COLUMNS}
        else:
            row = {
                'chr': r.chrom,
                'start': r.start,
                'end': r.end,
                'strand': r.strand,
                'width': r.width,
            }
        if errors:
            row['error'] = str(errors[i]) if i in errors else None
        rows.append(row)

    columns = RANGE_COLUMNS + (['error'] if errors else [])
    df = pd.DataFrame(rows, columns=columns)
    for col in ('start', 'end', 'width'):
        df[col] = df[col].astype('Int64')
    if region is not None:
        df.insert(0, 'region', region)
    return df


def write_ranges_tsv(
    frames: Sequence[pd.DataFrame],
    output_path: Path,
):
    """Concatenate range tables and write them as TSV."""
    if frames:
        df = pd.concat(list(frames), ignore_index=True)
    else:
        df = pd.DataFrame(columns=RANGE_COLUMNS)
    df.to_csv(output_path, sep='\t', index=False)
    logger.info(f"Wrote {len(df)} ranges to {output_path}")
    return df


def cut_sites_to_frame(
    anchors: pd.DataFrame,
    cut_sites,
) -> pd.DataFrame:
    """Append a cut_site column (and error column for BatchResults) to anchors."""
    df = anchors.copy()
    if isinstance(cut_sites, BatchResult):
        df['cut_site'] = pd.array(cut_sites.values, dtype='Int64')
        if cut_sites.errors:
            df['error'] = [
                str(cut_sites.errors[i]) if i in cut_sites.errors else None
                for i in range(len(df))
            ]
    else:
        df['cut_site'] = pd.array(list(cut_sites), dtype='Int64')
    return df
