"""Trigger BigQuery load jobs over the exported rate blobs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import bigquery

from fx_export.errors import LoadError
from fx_export.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    from google.auth.credentials import Credentials

LOGGER = get_logger(__name__)

RATES_SCHEMA: list[bigquery.SchemaField] = [
    bigquery.SchemaField("date", "DATE", mode="NULLABLE", description="Date of the measurement"),
    bigquery.SchemaField("base", "STRING", mode="NULLABLE", description="Base currency (ISO Code)"),
    bigquery.SchemaField(
        "currency", "STRING", mode="NULLABLE", description="Currency compared to (ISO Code)"
    ),
    bigquery.SchemaField(
        "units_per_currency",
        "FLOAT",
        mode="NULLABLE",
        description="Units per currency. Amount in currency = Amount in base / UPC",
    ),
    bigquery.SchemaField(
        "currencies_per_unit",
        "FLOAT",
        mode="NULLABLE",
        description="Currencies per unit. Amount in currency = Amount in base * CPU",
    ),
]


@dataclass(slots=True)
class LoadResult:
    """Outcome of a finished load job."""

    job_id: str
    source_uri: str
    destination: str
    output_rows: int | None = None


class BigQueryLoader:
    """Submit one NDJSON load job from a storage wildcard into a table."""

    def __init__(
        self,
        *,
        project: str | None = None,
        credentials: "Credentials | None" = None,
        client: bigquery.Client | None = None,
        write_disposition: str = bigquery.WriteDisposition.WRITE_TRUNCATE,
    ) -> None:
        self.project = project
        self.credentials = credentials
        self.client = client
        self.write_disposition = write_disposition

    def _get_client(self) -> bigquery.Client:
        """Lazily build the BigQuery client; tests may inject ``client``."""

        if self.client is None:
            self.client = bigquery.Client(project=self.project, credentials=self.credentials)
        return self.client

    def job_config(self, schema: list[bigquery.SchemaField] | None = None) -> bigquery.LoadJobConfig:
        return bigquery.LoadJobConfig(
            schema=list(schema or RATES_SCHEMA),
            source_format=bigquery.SourceFormat.NEWLINE_DELIMITED_JSON,
            write_disposition=self.write_disposition,
            create_disposition=bigquery.CreateDisposition.CREATE_IF_NEEDED,
        )

    def destination(self, dataset: str, table: str) -> str:
        if not dataset or not table:
            raise LoadError("A BigQuery dataset and table are required for the load job")
        prefix = f"{self.project}." if self.project else ""
        return f"{prefix}{dataset}.{table}"

    def load(
        self,
        source_uri: str,
        dataset: str,
        table: str,
        schema: list[bigquery.SchemaField] | None = None,
    ) -> LoadResult:
        """Load every blob matching ``source_uri`` into ``dataset.table``."""

        if not source_uri.startswith("gs://"):
            raise LoadError(f"BigQuery can only load from gs:// URIs, got {source_uri}")
        destination = self.destination(dataset, table)
        LOGGER.info("Submitting load job %s → %s", source_uri, destination)
        try:
            job = self._get_client().load_table_from_uri(
                source_uri,
                destination,
                job_config=self.job_config(schema),
            )
            job.result()
        except (GoogleAPIError, GoogleAuthError, OSError) as exc:
            raise LoadError(f"Load job into {destination} failed: {exc}") from exc
        if job.errors:
            raise LoadError(f"Load job {job.job_id} into {destination} reported errors: {job.errors}")
        LOGGER.info("Load job %s finished with %s rows", job.job_id, job.output_rows)
        return LoadResult(
            job_id=job.job_id,
            source_uri=source_uri,
            destination=destination,
            output_rows=job.output_rows,
        )

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


__all__ = ["RATES_SCHEMA", "BigQueryLoader", "LoadResult"]
