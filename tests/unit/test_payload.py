"""
Unit tests for hydration payload mapping.
"""

from src.models.payload import HydrationPayload


class TestHydrationPayload:
    """Tests for HydrationPayload parsing and mapping."""

    def test_full_payload_maps_every_field(self, sample_payload):
        """Test mapping a complete payload into a VehicleRecord."""
        payload = HydrationPayload.model_validate(sample_payload)
        record = payload.to_record("39212", "https://usedcars.bmw.co.uk/vehicle/39212", "BMW X5 xDrive50e")

        assert record.id == "39212"
        assert record.title == "BMW X5 xDrive50e"
        assert record.engine_fuel == "Petrol Plug-in Hybrid"
        assert record.engine_power == 489
        assert record.engine_size == 3.0
        assert record.mileage == 8450
        assert record.registration_date == "2023-09-01"
        assert record.manufactured_year == 2023
        assert record.battery_range == 67
        assert record.co2 == 26
        assert record.fuel_type == "Hybrid"

    def test_feature_order(self, sample_payload):
        """Features flatten additional, standard, interior, exterior."""
        record = HydrationPayload.model_validate(sample_payload).to_record("1", "u", None)
        assert record.features == [
            "Comfort Plus Pack",
            "Sky Lounge panoramic roof",
            "Heated front seats",
            "Bowers & Wilkins Diamond Surround Sound",
            "Ambient lighting",
            "LED headlights",
        ]

    def test_missing_optional_fields_are_none(self):
        """Absent optional sections map to None."""
        payload = HydrationPayload.model_validate({
            "advert_id": "7",
            "condition_and_state": {"mileage": 10},
            "dates": {"registration": "2024-01-01"},
        })
        record = payload.to_record("7", "https://usedcars.bmw.co.uk/vehicle/7", "")

        assert record.title == "BMW"
        assert record.engine_fuel is None
        assert record.engine_power is None
        assert record.engine_size is None
        assert record.battery_range is None
        assert record.co2 is None
        assert record.fuel_type is None
        assert record.features == []

    def test_unknown_keys_ignored(self, sample_payload):
        """Extra keys in the payload do not break parsing."""
        sample_payload["price"] = {"value": 65000}
        sample_payload["engine"]["cylinders"] = 6
        assert HydrationPayload.model_validate(sample_payload).is_complete()

    def test_feature_strings_and_objects_accepted(self):
        """Both feature shapes are accepted in every group."""
        payload = HydrationPayload.model_validate({
            "features": {
                "standard": ["Plain string", {"description": "Object"}, {"other": "no description"}, "  "],
            }
        })
        assert payload.features.flatten() == ["Plain string", "Object"]


class TestIsComplete:
    """Tests for the hydration readiness rule."""

    def test_complete(self, sample_payload):
        assert HydrationPayload.model_validate(sample_payload).is_complete()

    def test_missing_id(self, sample_payload):
        sample_payload["advert_id"] = ""
        assert not HydrationPayload.model_validate(sample_payload).is_complete()

    def test_missing_mileage(self, sample_payload):
        sample_payload["condition_and_state"] = {"manufactured_year": 2023}
        assert not HydrationPayload.model_validate(sample_payload).is_complete()

    def test_zero_mileage_is_present(self, sample_payload):
        """A new car with zero miles still counts as hydrated."""
        sample_payload["condition_and_state"]["mileage"] = 0
        assert HydrationPayload.model_validate(sample_payload).is_complete()

    def test_missing_registration(self, sample_payload):
        del sample_payload["dates"]
        assert not HydrationPayload.model_validate(sample_payload).is_complete()
