"""Input adapters that turn raw snapshot rows into investor profiles."""

from .snapshot import (
    DataAnomaly,
    SnapshotReport,
    UpstreamUnavailable,
    build_profiles,
    load_snapshot,
    profiles_from_payload,
)

__all__ = [
    "DataAnomaly",
    "SnapshotReport",
    "UpstreamUnavailable",
    "build_profiles",
    "load_snapshot",
    "profiles_from_payload",
]
