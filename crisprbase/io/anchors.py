"""
Anchor table parsing.

An anchor table is a TSV with one row per target:

    chr     pam_site    strand
    chr7    200         +
    chr7    200         -

Additional columns are kept as metadata and passed through to outputs.
"""

from pathlib import Path
from typing import List
import logging

import pandas as pd

from ..errors import InvalidAnchor

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('chr', 'pam_site', 'strand')


def validate_anchors(df: pd.DataFrame, strict: bool = True) -> List[str]:
    """
    Validate an anchor table. Returns list of errors.

    With strict=False only the required columns are checked; malformed
    rows are left for per-anchor error collection.
    """
    errors = []
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        errors.append(f"Anchor table is missing columns: {', '.join(missing)}")
        return errors
    if not strict:
        return errors

    if not pd.api.types.is_integer_dtype(df['pam_site']):
        errors.append("Column 'pam_site' must contain integers")

    bad_strands = sorted(set(df['strand'].astype(str)) - {'+', '-'})
    if bad_strands:
        errors.append(f"Invalid strand values: {', '.join(bad_strands)}")

    return errors


def load_anchors(path: Path, validate: bool = True, strict: bool = True) -> pd.DataFrame:
    """
    Load anchors from a TSV file.

    Args:
        path: Path to the anchor TSV
        validate: If True, raise on missing columns (and, if strict, on
            invalid values)
        strict: Reject the table when any row has an invalid strand or
            PAM site

    Returns:
        DataFrame with at least chr, pam_site and strand columns
    """
    df = pd.read_csv(path, sep='\t')

    if validate:
        errors = validate_anchors(df, strict=strict)
        if errors:
            raise InvalidAnchor('; '.join(errors))
        df['chr'] = df['chr'].astype(str)
        df['strand'] = df['strand'].astype(str)

    logger.info(f"Loaded {len(df)} anchors from {path}")
    return df
