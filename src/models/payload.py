"""
Typed view of the client-side hydration payload (window.UVL.AD).

Every nested section is optional; absent values map to None on the
VehicleRecord. Feature lists come in two shapes: top-level standard and
additional entries are objects with a `description`, while the interior and
exterior sections hold plain strings. Both are accepted everywhere.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.vehicle import Number, VehicleRecord


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ValueField(_Section):
    value: Optional[Number] = None


class EngineSize(_Section):
    litres: Optional[Number] = None


class Engine(_Section):
    fuel: Optional[str] = None
    power: Optional[ValueField] = None
    size: Optional[EngineSize] = None


class Condition(_Section):
    mileage: Optional[Number] = None
    manufactured_year: Optional[Number] = None


class Dates(_Section):
    registration: Optional[str] = None


class Battery(_Section):
    range: Optional[ValueField] = None


class Consumption(_Section):
    co2: Optional[ValueField] = None


def _descriptions(items: Any) -> List[str]:
    out: List[str] = []
    for item in items or []:
        if isinstance(item, dict):
            text = item.get("description")
        else:
            text = item
        if isinstance(text, str) and text.strip():
            out.append(text.strip())
    return out


class FeatureGroup(_Section):
    standard: List[str] = Field(default_factory=list)
    additional: List[str] = Field(default_factory=list)

    @field_validator("standard", "additional", mode="before")
    @classmethod
    def to_descriptions(cls, v: Any) -> List[str]:
        return _descriptions(v)


class Features(FeatureGroup):
    interior: Optional[FeatureGroup] = None
    exterior: Optional[FeatureGroup] = None

    def flatten(self) -> List[str]:
        """Additional before standard, top level then interior then exterior."""
        out = list(self.additional) + list(self.standard)
        for group in (self.interior, self.exterior):
            if group is not None:
                out.extend(group.additional)
                out.extend(group.standard)
        return out


class HydrationPayload(_Section):
    advert_id: Optional[Union[str, int]] = None
    engine: Optional[Engine] = None
    condition_and_state: Optional[Condition] = None
    dates: Optional[Dates] = None
    battery: Optional[Battery] = None
    consumption: Optional[Consumption] = None
    fuel_category: Optional[str] = None
    features: Optional[Features] = None

    def is_complete(self) -> bool:
        """Identifier, mileage and registration date are all present."""
        return (
            self.advert_id not in (None, "")
            and self.condition_and_state is not None
            and self.condition_and_state.mileage is not None
            and self.dates is not None
            and bool(self.dates.registration)
        )

    def to_record(self, vehicle_id: str, url: str, title: Optional[str]) -> VehicleRecord:
        engine = self.engine or Engine()
        condition = self.condition_and_state or Condition()
        return VehicleRecord(
            id=vehicle_id,
            title=title or "BMW",
            url=url,
            engine_fuel=engine.fuel,
            engine_power=engine.power.value if engine.power else None,
            engine_size=engine.size.litres if engine.size else None,
            mileage=condition.mileage,
            registration_date=self.dates.registration if self.dates else None,
            manufactured_year=condition.manufactured_year,
            battery_range=self.battery.range.value if self.battery and self.battery.range else None,
            co2=self.consumption.co2.value if self.consumption and self.consumption.co2 else None,
            fuel_type=self.fuel_category,
            features=self.features.flatten() if self.features else [],
        )
