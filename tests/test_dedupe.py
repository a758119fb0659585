"""Tests for cross-provider deduplication."""

from __future__ import annotations

from wildlife_sightings.dedupe import (
    DEDUPE_DISTANCE_KM,
    deduplicate_observations,
    is_spatial_duplicate,
    same_species,
)
from wildlife_sightings.schemas import Observation, Provider

# One metre of latitude in degrees (mean earth radius 6371 km).
METRE = 1 / 111_195


def _obs(
    obs_id: str,
    lat: float = 37.7749,
    lng: float = -122.4194,
    common: str | None = "American Robin",
    scientific: str | None = "Turdus migratorius",
) -> Observation:
    provider = Provider(obs_id.split("-", 1)[0])
    return Observation(
        id=obs_id,
        provider=provider,
        lat=lat,
        lng=lng,
        common_name=common,
        scientific_name=scientific,
    )


class TestSameSpecies:
    def test_common_name_match(self) -> None:
        assert same_species(_obs("ebird-1", scientific=None), _obs("inat-1", scientific=None))

    def test_scientific_name_match(self) -> None:
        a = _obs("ebird-1", common="American Robin")
        b = _obs("inat-1", common="Robin")
        assert same_species(a, b)

    def test_both_names_missing_never_match(self) -> None:
        a = _obs("ebird-1", common=None, scientific=None)
        b = _obs("inat-1", common=None, scientific=None)
        assert not same_species(a, b)

    def test_different_species(self) -> None:
        a = _obs("ebird-1")
        b = _obs("inat-1", common="Steller's Jay", scientific="Cyanocitta stelleri")
        assert not same_species(a, b)


class TestIsSpatialDuplicate:
    def test_threshold_is_thirty_metres(self) -> None:
        assert DEDUPE_DISTANCE_KM == 0.03

    def test_same_species_close_together(self) -> None:
        a = _obs("ebird-1")
        b = _obs("inat-1", lat=37.7749 + 10 * METRE)
        assert is_spatial_duplicate(a, b)

    def test_same_species_far_apart(self) -> None:
        a = _obs("ebird-1")
        b = _obs("inat-1", lat=37.7749 + 50 * METRE)
        assert not is_spatial_duplicate(a, b)


class TestDeduplicateObservations:
    """Test deduplicate_observations."""

    def test_empty(self) -> None:
        assert deduplicate_observations([]) == []

    def test_exact_id_duplicates_collapse(self) -> None:
        a = _obs("ebird-OBS1")
        b = _obs("ebird-OBS1")
        assert deduplicate_observations([a, b]) == [a]

    def test_cross_provider_same_sighting_keeps_first(self) -> None:
        ebird_robin = _obs("ebird-OBS1")
        inat_robin = _obs("inat-99", lat=37.7749 + 10 * METRE)
        result = deduplicate_observations([ebird_robin, inat_robin])
        assert [o.id for o in result] == ["ebird-OBS1"]

    def test_different_species_same_spot_both_kept(self) -> None:
        robin = _obs("ebird-OBS1")
        jay = _obs("inat-99", common="Steller's Jay", scientific="Cyanocitta stelleri")
        assert deduplicate_observations([robin, jay]) == [robin, jay]

    def test_unnamed_records_same_spot_both_kept(self) -> None:
        a = _obs("inat-1", common=None, scientific=None)
        b = _obs("inat-2", common=None, scientific=None)
        assert len(deduplicate_observations([a, b])) == 2

    def test_same_species_beyond_threshold_both_kept(self) -> None:
        a = _obs("ebird-OBS1")
        b = _obs("inat-2", lat=37.7749 + 40 * METRE)
        assert len(deduplicate_observations([a, b])) == 2

    def test_compares_against_accepted_records_only(self) -> None:
        # b is dropped as a duplicate of a; c is near b but not near a.
        a = _obs("ebird-OBS1")
        b = _obs("inat-2", lat=37.7749 + 20 * METRE)
        c = _obs("inat-3", lat=37.7749 + 40 * METRE)
        assert [o.id for o in deduplicate_observations([a, b, c])] == ["ebird-OBS1", "inat-3"]

    def test_preserves_input_order(self) -> None:
        items = [
            _obs("inat-3", lat=10.0),
            _obs("ebird-OBS1", lat=20.0),
            _obs("inat-1", lat=30.0),
        ]
        assert deduplicate_observations(items) == items

    def test_custom_threshold(self) -> None:
        a = _obs("ebird-OBS1")
        b = _obs("inat-2", lat=37.7749 + 40 * METRE)
        assert len(deduplicate_observations([a, b], threshold_km=0.05)) == 1

    def test_accepts_generator(self) -> None:
        result = deduplicate_observations(_obs(f"inat-{i}", lat=float(i)) for i in range(3))
        assert len(result) == 3
