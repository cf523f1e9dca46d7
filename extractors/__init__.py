"""Row extractors: data-store rows to validated Incident objects."""

from extractors.records import InvalidIncidentRecord, incident_from_row, incidents_from_rows

__all__ = ["InvalidIncidentRecord", "incident_from_row", "incidents_from_rows"]
