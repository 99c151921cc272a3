from datetime import date

from fx_export import FxExport

print(FxExport.__version__)  # 0.1.0

# Plan only: which blobs would be written for the last three days?
fx = FxExport(bucket="gs://my-fx-bucket", bases="USD,EUR,SGD", end_date=date(2024, 3, 10))
for unit in fx.plan():
    print(unit.destination)
# => rates/2024/03/10/USD/export.json.gz, rates/2024/03/10/EUR/export.json.gz, ...

# Write the window to a local directory without loading it into BigQuery
local = FxExport(
    bucket="file:///tmp/fx-export",
    bases=["USD"],
    delta=2,
    app_id="<your-open-exchange-rates-app-id>",
    skip_load=True,
)
result = local.run()
print(result.paths)

# Full run: upload to GCS and trigger one BigQuery load over gs://my-fx-bucket/rates/*
export = FxExport(
    bucket="my-fx-bucket",
    bases="USD,EUR",
    app_id="<your-open-exchange-rates-app-id>",
    project="my-project",
    dataset="fx",
    table="rates",
    key_path="service-account.json",
)
result = export.run()
print(result.load)
