"""Dataset loading utilities."""

import io
import logging
from pathlib import Path

import httpx
import pandas as pd

logger = logging.getLogger(__name__)


def read_table(path: Path) -> pd.DataFrame:
    """
    Read tabular data file (Excel or CSV) based on file extension.

    Supported formats:
    - Excel: .xlsx, .xls
    - CSV: .csv

    A leading unnamed row-number column (as written by R's write.csv) is dropped.

    Args:
        path: Path to data file

    Returns:
        pandas DataFrame

    Raises:
        ValueError: If file format is not supported
        FileNotFoundError: If file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in [".xlsx", ".xls"]:
        df = pd.read_excel(path)
    elif suffix == ".csv":
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. Supported formats: .xlsx, .xls, .csv")

    if len(df.columns) > 0 and (str(df.columns[0]).startswith("Unnamed") or str(df.columns[0]) == ""):
        logger.debug("Dropping unnamed row-number column from %s", path)
        df = df.drop(columns=df.columns[0])

    return df


def fetch_csv(url: str, timeout_s: float = 30.0, client: httpx.Client | None = None) -> pd.DataFrame:
    """
    Download a CSV file over HTTP(S) and parse it.

    Args:
        url: File URL
        timeout_s: Request timeout in seconds
        client: Optional preconfigured client (closed by the caller)

    Returns:
        pandas DataFrame

    Raises:
        httpx.HTTPError: On connection errors or a non-2xx response
    """
    owned = client is None
    http = client or httpx.Client(timeout=timeout_s, follow_redirects=True)
    try:
        logger.info("Downloading %s", url)
        response = http.get(url)
        response.raise_for_status()
    finally:
        if owned:
            http.close()

    df = pd.read_csv(io.StringIO(response.text))
    logger.info("Downloaded %d rows, %d columns", df.shape[0], df.shape[1])
    return df
