"""Runtime services: environment settings and telelog-backed telemetry."""
