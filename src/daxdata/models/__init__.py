from daxdata.models.dax import CSVRow, DAXRecord, REQUIRED_CSV_FIELDS

__all__ = [
    "CSVRow",
    "DAXRecord",
    "REQUIRED_CSV_FIELDS",
]
