"""Export modules for datanest containers."""

from datanest.export.csv import export_csv

__all__ = ["export_csv"]
