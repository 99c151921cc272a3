"""End-to-end pipeline tests with in-process collaborators."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from fx_export.config import ExportConfig, StorageLocation
from fx_export.errors import DivisionError, FetchError
from fx_export.ingestion.models import ExchangeRate, RawSnapshot
from fx_export.pipeline import exporter as pipeline_module
from fx_export.pipeline.exporter import build_config, build_storage, export_rates, main, parse_args
from fx_export.storage.gcs_backend import GCSBackend
from fx_export.storage.local_backend import LocalBackend
from fx_export.warehouse.bigquery_loader import LoadResult


class _DummyProvider:
    def __init__(self, rates: dict[str, dict[str, float]] | None = None, *, fail_on: str | None = None) -> None:
        self.rates = rates or {}
        self.fail_on = fail_on
        self.calls: list[tuple[date, str]] = []

    def fetch_snapshot(self, rate_date: date, base: str) -> RawSnapshot:
        self.calls.append((rate_date, base))
        if base == self.fail_on:
            raise FetchError(f"provider down for {base}")
        return RawSnapshot(base=base, timestamp=1, rates=self.rates.get(base, {"XAU": 0.5}))


class _DummyLoader:
    def __init__(self, storage_root: Path | None = None) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.storage_root = storage_root
        self.blobs_at_load: list[Path] = []

    def load(self, source_uri: str, dataset: str, table: str) -> LoadResult:
        self.calls.append((source_uri, dataset, table))
        if self.storage_root is not None:
            self.blobs_at_load = sorted(self.storage_root.rglob("export.json.gz"))
        return LoadResult(job_id="job-1", source_uri=source_uri, destination=f"{dataset}.{table}")


def _config(**overrides) -> ExportConfig:
    options = dict(
        end_date=date(2024, 3, 10),
        delta=2,
        bases=("USD", "EUR"),
        app_id="app",
        storage=StorageLocation.from_url("gs://fx-bucket"),
        dataset="fx",
        table="rates",
    )
    options.update(overrides)
    return ExportConfig(**options)


def test_export_rates_scenario(tmp_path: Path) -> None:
    provider = _DummyProvider({"USD": {"EUR": 0.5}, "EUR": {"USD": 2.0}})
    storage = LocalBackend(tmp_path)
    loader = _DummyLoader(tmp_path)

    result = export_rates(_config(), provider=provider, storage=storage, loader=loader)

    assert sorted(provider.calls) == [
        (date(2024, 3, 9), "EUR"),
        (date(2024, 3, 9), "USD"),
        (date(2024, 3, 10), "EUR"),
        (date(2024, 3, 10), "USD"),
    ]
    assert result.total == 4
    assert len(set(result.paths)) == 4
    assert len(loader.calls) == 1
    assert loader.calls[0] == (storage.wildcard_uri(), "fx", "rates")
    assert len(loader.blobs_at_load) == 4
    assert result.load is not None and result.load.job_id == "job-1"

    line = (tmp_path / "rates/2024/03/10/USD/export.json.gz").read_text()
    assert json.loads(line) == {
        "date": "2024-03-10",
        "base": "USD",
        "currency": "EUR",
        "units_per_currency": 2.0,
        "currencies_per_unit": 0.5,
    }


def test_export_rates_rerun_overwrites_same_paths(tmp_path: Path) -> None:
    storage = LocalBackend(tmp_path)
    first = export_rates(_config(), provider=_DummyProvider({"USD": {"EUR": 0.5}}), storage=storage, loader=_DummyLoader())
    second = export_rates(_config(), provider=_DummyProvider({"USD": {"EUR": 0.25}}), storage=storage, loader=_DummyLoader())

    assert first.paths == second.paths
    assert len(list(tmp_path.rglob("export.json.gz"))) == 4
    record = ExchangeRate.from_json((tmp_path / "rates/2024/03/09/USD/export.json.gz").read_text())
    assert record.units_per_currency == 4.0


def test_export_rates_zero_delta_still_loads(tmp_path: Path) -> None:
    provider = _DummyProvider()
    loader = _DummyLoader()

    result = export_rates(_config(delta=0), provider=provider, storage=LocalBackend(tmp_path), loader=loader)

    assert provider.calls == []
    assert result.paths == []
    assert len(loader.calls) == 1
    assert list(tmp_path.iterdir()) == []


def test_export_rates_error_skips_load(tmp_path: Path) -> None:
    loader = _DummyLoader()

    with pytest.raises(FetchError):
        export_rates(
            _config(),
            provider=_DummyProvider(fail_on="EUR"),
            storage=LocalBackend(tmp_path),
            loader=loader,
        )

    assert loader.calls == []
    assert (tmp_path / "rates/2024/03/10/USD/export.json.gz").exists()
    assert not (tmp_path / "rates/2024/03/09").exists()


def test_export_rates_zero_rate_aborts(tmp_path: Path) -> None:
    loader = _DummyLoader()

    with pytest.raises(DivisionError):
        export_rates(
            _config(bases=("USD",)),
            provider=_DummyProvider({"USD": {"EUR": 0.0}}),
            storage=LocalBackend(tmp_path),
            loader=loader,
        )

    assert loader.calls == []


def test_export_rates_skip_load(tmp_path: Path) -> None:
    config = _config(storage=StorageLocation.from_url(f"file://{tmp_path}"), skip_load=True)

    result = export_rates(config, provider=_DummyProvider())

    assert result.load is None
    assert result.total == 4
    assert len(list(tmp_path.rglob("export.json.gz"))) == 4


def test_export_rates_dry_run_touches_nothing(tmp_path: Path) -> None:
    provider = _DummyProvider()
    loader = _DummyLoader()

    result = export_rates(
        _config(dry_run=True, app_id=None),
        provider=provider,
        storage=LocalBackend(tmp_path),
        loader=loader,
    )

    assert [unit.destination for unit in result.planned] == [
        "rates/2024/03/10/USD/export.json.gz",
        "rates/2024/03/10/EUR/export.json.gz",
        "rates/2024/03/09/USD/export.json.gz",
        "rates/2024/03/09/EUR/export.json.gz",
    ]
    assert result.paths == []
    assert provider.calls == []
    assert loader.calls == []


def test_build_storage_selects_backend(tmp_path: Path) -> None:
    gcs = build_storage(_config())
    local = build_storage(_config(storage=StorageLocation.from_url(f"file://{tmp_path}")))

    assert isinstance(gcs, GCSBackend)
    assert gcs.bucket_name == "fx-bucket"
    assert isinstance(local, LocalBackend)
    assert local.root == tmp_path.resolve()


def test_parse_args_and_build_config() -> None:
    args = parse_args(
        [
            "--from",
            "2024-03-10",
            "--delta",
            "2",
            "--bases",
            "usd,eur",
            "--app",
            "app",
            "--bucket",
            "gs://fx-bucket",
            "--dataset",
            "fx",
            "--table",
            "rates",
            "--gzip",
        ]
    )

    config = build_config(args)

    assert config.end_date == date(2024, 3, 10)
    assert config.delta == 2
    assert config.bases == ("USD", "EUR")
    assert config.storage == StorageLocation.from_url("fx-bucket")
    assert config.compress is True
    assert config.write_disposition == "WRITE_TRUNCATE"


def test_parse_args_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OXR_APP_ID", "env-app")
    monkeypatch.setenv("FX_EXPORT_BUCKET", "env-bucket")

    args = parse_args([])

    assert args.app_id == "env-app"
    assert args.bucket == "env-bucket"
    assert args.delta == 3
    assert args.bases == "SGD"


def test_main_returns_error_status_on_export_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)

    def _fail(config: ExportConfig) -> None:
        raise FetchError("provider down")

    monkeypatch.setattr(pipeline_module, "export_rates", _fail)

    status = main(["--app", "app", "--bucket", "fx-bucket", "--dataset", "fx", "--table", "rates"])

    assert status == 1


def test_main_returns_zero_on_success(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[ExportConfig] = []
    monkeypatch.setattr(pipeline_module, "export_rates", captured.append)

    status = main(["--from", "2024-03-10", "--delta", "0", "--dry-run"])

    assert status == 0
    assert captured[0].delta == 0
    assert captured[0].dry_run is True


def test_main_rejects_invalid_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OXR_APP_ID", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        main(["--bucket", "fx-bucket", "--dataset", "fx", "--table", "rates"])

    assert excinfo.value.code == 2


def test_export_rates_closes_provider_when_storage_setup_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    built: list["_ClosingClient"] = []

    class _ClosingClient(_DummyProvider):
        def __init__(self, *_args, **_kwargs) -> None:
            super().__init__()
            self.closed = False
            built.append(self)

        def close(self) -> None:
            self.closed = True

    def _broken_storage(config: ExportConfig, credentials=None):
        raise ValueError("cannot build storage")

    monkeypatch.setattr(pipeline_module, "OpenExchangeRatesClient", _ClosingClient)
    monkeypatch.setattr(pipeline_module, "build_storage", _broken_storage)

    with pytest.raises(ValueError, match="cannot build storage"):
        export_rates(_config(), loader=_DummyLoader())

    assert len(built) == 1
    assert built[0].closed is True
