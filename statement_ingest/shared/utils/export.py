"""CSV export of statement processing results."""

from pathlib import Path
from typing import Tuple, Union

from statement_ingest.shared.utils.logging_config import get_logger

logger = get_logger(__name__)


def export_result_csv(
    result,
    directory: Union[str, Path],
    stem: str = "statement",
) -> Tuple[Path, Path]:
    """
    Write accepted and rejected transactions as two CSV files.

    Args:
        result: StatementProcessingResult
        directory: Output directory (created if missing)
        stem: File name prefix

    Returns:
        (accepted_csv_path, rejected_csv_path)

    Example:
        >>> export_result_csv(result, "out", "march")
        (PosixPath('out/march_transactions.csv'), PosixPath('out/march_rejected.csv'))
    """
    output_dir = Path(directory)
    output_dir.mkdir(parents=True, exist_ok=True)

    accepted_path = output_dir / f"{stem}_transactions.csv"
    rejected_path = output_dir / f"{stem}_rejected.csv"

    result.to_dataframe().to_csv(accepted_path, index=False)
    result.rejected_to_dataframe().to_csv(rejected_path, index=False)

    logger.info(
        f"Exported {len(result.transactions)} transaction(s) to {accepted_path} "
        f"and {len(result.rejected_transactions)} rejection(s) to {rejected_path}"
    )
    return accepted_path, rejected_path
