"""Progressive collision CSV reader.

This module streams a header-named CSV from a local path or S3 object
with pyarrow's incremental reader. Only the columns the enrichment step
reads are converted, each as a string, so type inference on the first
block can never fail later in the stream. Rows whose field count does
not match the header are skipped and reported instead of aborting.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterator

import pyarrow as pa
from pyarrow import csv as pa_csv

from core.config import AtlasConfig
from core.constants import SOURCE_COLUMNS
from core.errors import AtlasConfigError, AtlasDependencyError, AtlasIngestError
from core.logging_config import get_logger
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri

_LOGGER = get_logger(__name__)

RowBatch = list[dict[str, Any]]
StreamOpener = Callable[[], Any]
MalformedRowCallback = Callable[[], None]


def iter_row_batches(
    source_uri: str,
    config: AtlasConfig,
    batch_size: int,
    on_malformed_row: MalformedRowCallback | None = None,
) -> Iterator[RowBatch]:
    """Yield row mappings from a collision CSV in bounded batches.

    The source is opened once; the header row comes from the same reader
    that streams the data.

    Args:
        source_uri: Local path or ``s3://bucket/key`` URI.
        config: Runtime configuration for S3 session defaults.
        batch_size: Maximum rows per yielded batch.
        on_malformed_row: Called once per skipped row whose field count
            does not match the header.

    Yields:
        Lists of column name to string value mappings, in file order.
        Columns absent from the file map to ``None``.

    Raises:
        AtlasIngestError: If the source is unreachable or its header or
            blocks cannot be read.
    """
    if batch_size < 1:
        raise AtlasConfigError(
            f"Invalid ingest batch size {batch_size}: expected an integer >= 1."
        )
    if is_s3_uri(source_uri):
        opener = _s3_opener(parse_s3_uri(source_uri), config)
    else:
        opener = _local_opener(Path(source_uri).expanduser())
    try:
        with opener() as stream:
            reader = pa_csv.open_csv(
                stream,
                parse_options=_parse_options(source_uri, on_malformed_row),
                convert_options=_convert_options(),
            )
            yield from _iter_reader_batches(reader, source_uri, batch_size)
    except (pa.ArrowException, OSError) as error:
        raise AtlasIngestError(
            f"Failed to read collision CSV at {source_uri}: {error}. "
            "Check that the file is reachable and its first row names the columns."
        ) from error


def _iter_reader_batches(reader: Any, source_uri: str, batch_size: int) -> Iterator[RowBatch]:
    """Re-chunk pyarrow record batches into row batches of ``batch_size``."""
    while True:
        try:
            record_batch = reader.read_next_batch()
        except StopIteration:
            return
        except (pa.ArrowException, OSError) as error:
            raise AtlasIngestError(
                f"Failed to parse collision CSV at {source_uri}: {error}. "
                "Re-download the source file."
            ) from error
        for offset in range(0, record_batch.num_rows, batch_size):
            yield record_batch.slice(offset, batch_size).to_pylist()


def _convert_options() -> Any:
    return pa_csv.ConvertOptions(
        column_types={name: pa.string() for name in SOURCE_COLUMNS},
        include_columns=list(SOURCE_COLUMNS),
        include_missing_columns=True,
        strings_can_be_null=False,
    )


def _parse_options(source_uri: str, on_malformed_row: MalformedRowCallback | None) -> Any:
    def skip_invalid_row(row: Any) -> str:
        _LOGGER.debug(
            "csv_row_skipped",
            source_uri=source_uri,
            row_number=row.number,
            expected_columns=row.expected_columns,
            actual_columns=row.actual_columns,
        )
        if on_malformed_row is not None:
            on_malformed_row()
        return "skip"

    return pa_csv.ParseOptions(newlines_in_values=True, invalid_row_handler=skip_invalid_row)


def _local_opener(source_path: Path) -> StreamOpener:
    """Build an opener for a local CSV file.

    Args:
        source_path: CSV file path, optionally compressed.

    Returns:
        Zero-argument callable opening a pyarrow input stream.

    Raises:
        AtlasIngestError: If the path is missing or not a file.
    """
    if not source_path.is_file():
        raise AtlasIngestError(
            f"Failed to read collision CSV at {source_path}: file does not exist. "
            "Download the collisions export or set ATLAS_SOURCE_URI."
        )
    return lambda: pa.input_stream(str(source_path))


def _s3_opener(location: S3Location, config: AtlasConfig) -> StreamOpener:
    """Build an opener that streams an S3 object body.

    Args:
        location: Bucket and key of the CSV object.
        config: Runtime config containing optional profile/region.

    Returns:
        Zero-argument callable opening a pyarrow-wrapped object body.
    """
    s3_client = _create_s3_client(config)

    def open_object() -> Any:
        try:
            response = s3_client.get_object(Bucket=location.bucket, Key=location.key)
        except Exception as error:
            raise AtlasIngestError(
                f"Failed to fetch s3://{location.bucket}/{location.key}: {error}. "
                "Check AWS credentials and the object key."
            ) from error
        return pa.PythonFile(response["Body"], mode="r")

    return open_object


def _create_s3_client(config: AtlasConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        AtlasDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise AtlasDependencyError(
            "S3 sources require boto3, but it is not installed. "
            "Install boto3 to load collisions from s3:// URIs."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")
