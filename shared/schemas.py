"""Pydantic schemas for validation and serialization.

Input schemas accept the PascalCase field names used on the wire
(``ConsumerID``, ``WardCommittee``...) as well as the snake_case attribute
names; output schemas read ORM objects and dump with the wire names.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict
from shared.validation import Validator, sanitize_html


class WireModel(BaseModel):
    """Base for request payloads."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra='ignore',
    )


# Nested descriptors (stored as JSON on the response record)
class PoleDescriptor(WireModel):
    pole_name: Optional[str] = Field(None, alias='PoleName', max_length=200)
    hight_of_pole: Optional[str] = Field(None, alias='HightofPole', max_length=50)
    type_of_bracket: Optional[str] = Field(None, alias='TypeofBracket', max_length=200)
    bracket: Optional[str] = Field(None, alias='Bracket', max_length=200)


class LightDescriptor(WireModel):
    light_name: Optional[str] = Field(None, alias='LightName', max_length=200)
    watts: Optional[str] = Field(None, alias='Watts', max_length=50)


class CableDescriptor(WireModel):
    cable_type: Optional[str] = Field(None, alias='CableType', max_length=200)
    sub_type_name: Optional[str] = Field(None, alias='SubTypeName', max_length=200)
    cable_watts: Optional[str] = Field(None, alias='CableWatts', max_length=50)


def _descriptor_json(descriptor):
    """Dump a descriptor with wire names for JSON storage."""
    if descriptor is None:
        return None
    return descriptor.model_dump(by_alias=True)


# Application Schemas
class ApplicationFields(WireModel):
    """Business fields shared by create and update payloads."""
    ward_committee: Optional[str] = Field(None, alias='WardCommittee', max_length=200)
    new_meter_number: Optional[str] = Field(None, alias='NewMeterNumber', max_length=100)
    purpose: Optional[str] = Field(None, alias='Purpose', max_length=200)
    type: Optional[str] = Field(None, alias='Type', max_length=100)
    address: Optional[str] = Field(None, alias='Address', max_length=1000)
    meter_latitude: Optional[float] = Field(None, alias='MeterLatitude')
    meter_longitude: Optional[float] = Field(None, alias='MeterLongitude')
    sanction_load: Optional[str] = Field(None, alias='SanctionLoad', max_length=50)
    timer_panel: Optional[bool] = Field(None, alias='TimerPanel')

    @field_validator('address')
    @classmethod
    def sanitize_text_fields(cls, v):
        if v:
            return sanitize_html(v)
        return v

    @field_validator('meter_latitude', mode='before')
    @classmethod
    def validate_latitude(cls, v):
        return Validator.validate_coordinate(v, 'MeterLatitude', 90)

    @field_validator('meter_longitude', mode='before')
    @classmethod
    def validate_longitude(cls, v):
        return Validator.validate_coordinate(v, 'MeterLongitude', 180)


APPLICATION_SCALAR_FIELDS = tuple(ApplicationFields.model_fields)


class ApplicationCreate(ApplicationFields):
    consumer_id: str = Field(..., alias='ConsumerID', min_length=1, max_length=100)
    meter_image: Optional[str] = Field(None, alias='MeterImage')
    timer_panel_image: Optional[str] = Field(None, alias='TimerPanelImage')

    def record_fields(self) -> Dict[str, Any]:
        """Column values for the new record, images excluded."""
        data = self.model_dump(include=set(APPLICATION_SCALAR_FIELDS))
        data['consumer_id'] = self.consumer_id
        return data


# Response Schemas
class ResponseCreate(WireModel):
    """Flat payload used to append a response to an application."""
    ward_committee: Optional[str] = Field(None, alias='WardCommittee', max_length=200)
    pole_name: Optional[str] = Field(None, alias='PoleName', max_length=200)
    hight_of_pole: Optional[str] = Field(None, alias='HightofPole', max_length=50)
    type_of_bracket: Optional[str] = Field(None, alias='TypeofBracket', max_length=200)
    bracket: Optional[str] = Field(None, alias='Bracket', max_length=200)
    number_light: Optional[int] = Field(None, alias='NumberLight', ge=0)
    light_name: Optional[str] = Field(None, alias='LightName', max_length=200)
    watts: Optional[str] = Field(None, alias='Watts', max_length=50)
    pole_latitude: Optional[float] = Field(None, alias='PoleLatitude')
    pole_longitude: Optional[float] = Field(None, alias='PoleLongitude')
    cable_type: Optional[str] = Field(None, alias='CableType', max_length=200)
    sub_type_name: Optional[str] = Field(None, alias='SubTypeName', max_length=200)
    cable_watts: Optional[str] = Field(None, alias='CableWatts', max_length=50)
    pole_image: Optional[str] = Field(None, alias='PoleImage')

    @field_validator('pole_latitude', mode='before')
    @classmethod
    def validate_latitude(cls, v):
        return Validator.validate_coordinate(v, 'PoleLatitude', 90)

    @field_validator('pole_longitude', mode='before')
    @classmethod
    def validate_longitude(cls, v):
        return Validator.validate_coordinate(v, 'PoleLongitude', 180)

    def record_fields(self) -> Dict[str, Any]:
        """Column values for a new response record, nesting the descriptors."""
        return {
            'ward_committee': self.ward_committee,
            'type_of_pole': _descriptor_json(PoleDescriptor(
                pole_name=self.pole_name,
                hight_of_pole=self.hight_of_pole,
                type_of_bracket=self.type_of_bracket,
                bracket=self.bracket,
            )),
            'type_of_light': _descriptor_json(LightDescriptor(
                light_name=self.light_name,
                watts=self.watts,
            )),
            'number_light': self.number_light,
            'pole_latitude': self.pole_latitude,
            'pole_longitude': self.pole_longitude,
            'types_of_cable': _descriptor_json(CableDescriptor(
                cable_type=self.cable_type,
                sub_type_name=self.sub_type_name,
                cable_watts=self.cable_watts,
            )),
        }


class ResponseUpdate(WireModel):
    """One entry of the ``Response`` array in an update payload (stored shape)."""
    id: Optional[str] = Field(None, alias='_id', max_length=32)
    ward_committee: Optional[str] = Field(None, alias='WardCommittee', max_length=200)
    type_of_pole: Optional[PoleDescriptor] = Field(None, alias='TypeofPole')
    type_of_light: Optional[LightDescriptor] = Field(None, alias='TypeofLight')
    number_light: Optional[int] = Field(None, alias='NumberLight', ge=0)
    pole_image_data: Optional[str] = Field(None, alias='PoleImageData')
    pole_latitude: Optional[float] = Field(None, alias='PoleLatitude')
    pole_longitude: Optional[float] = Field(None, alias='PoleLongitude')
    types_of_cable: Optional[CableDescriptor] = Field(None, alias='TypesofCable')

    @field_validator('pole_latitude', mode='before')
    @classmethod
    def validate_latitude(cls, v):
        return Validator.validate_coordinate(v, 'PoleLatitude', 90)

    @field_validator('pole_longitude', mode='before')
    @classmethod
    def validate_longitude(cls, v):
        return Validator.validate_coordinate(v, 'PoleLongitude', 180)

    def record_fields(self) -> Dict[str, Any]:
        """Column values for the entry, image reference excluded."""
        return {
            'ward_committee': self.ward_committee,
            'type_of_pole': _descriptor_json(self.type_of_pole),
            'type_of_light': _descriptor_json(self.type_of_light),
            'number_light': self.number_light,
            'pole_latitude': self.pole_latitude,
            'pole_longitude': self.pole_longitude,
            'types_of_cable': _descriptor_json(self.types_of_cable),
        }


class ApplicationUpdate(ApplicationFields):
    """Partial update of an application.

    Only fields present in the payload are applied. ``ConsumerID`` and
    ``ApplicationID`` are not updatable and are dropped if sent. Image
    fields carry a new base64 payload; absent or empty means "keep".
    """
    meter_image_data: Optional[str] = Field(None, alias='MeterImageData')
    timer_panel_image: Optional[str] = Field(None, alias='TimerPanelImage')
    responses: Optional[List[ResponseUpdate]] = Field(None, alias='Response')

    def scalar_fields(self) -> Dict[str, Any]:
        """Scalar fields explicitly supplied by the client."""
        return self.model_dump(include=set(APPLICATION_SCALAR_FIELDS), exclude_unset=True)


# Output Schemas
class ResponseSchema(BaseModel):
    id: str = Field(serialization_alias='_id')
    ward_committee: Optional[str] = Field(None, serialization_alias='WardCommittee')
    consumer_id: Optional[str] = Field(None, serialization_alias='ConsumerID')
    type_of_pole: Optional[Dict[str, Any]] = Field(None, serialization_alias='TypeofPole')
    type_of_light: Optional[Dict[str, Any]] = Field(None, serialization_alias='TypeofLight')
    number_light: Optional[int] = Field(None, serialization_alias='NumberLight')
    pole_image_data: Optional[str] = Field(None, serialization_alias='PoleImageData')
    pole_latitude: Optional[float] = Field(None, serialization_alias='PoleLatitude')
    pole_longitude: Optional[float] = Field(None, serialization_alias='PoleLongitude')
    types_of_cable: Optional[Dict[str, Any]] = Field(None, serialization_alias='TypesofCable')
    date: Optional[str] = Field(None, serialization_alias='Date')
    time: Optional[str] = Field(None, serialization_alias='Time')

    model_config = ConfigDict(from_attributes=True)


class ApplicationSchema(BaseModel):
    application_id: str = Field(serialization_alias='ApplicationID')
    consumer_id: str = Field(serialization_alias='ConsumerID')
    ward_committee: Optional[str] = Field(None, serialization_alias='WardCommittee')
    new_meter_number: Optional[str] = Field(None, serialization_alias='NewMeterNumber')
    purpose: Optional[str] = Field(None, serialization_alias='Purpose')
    type: Optional[str] = Field(None, serialization_alias='Type')
    address: Optional[str] = Field(None, serialization_alias='Address')
    meter_latitude: Optional[float] = Field(None, serialization_alias='MeterLatitude')
    meter_longitude: Optional[float] = Field(None, serialization_alias='MeterLongitude')
    sanction_load: Optional[str] = Field(None, serialization_alias='SanctionLoad')
    timer_panel: Optional[bool] = Field(None, serialization_alias='TimerPanel')
    meter_image_data: Optional[str] = Field(None, serialization_alias='MeterImageData')
    timer_panel_image: Optional[str] = Field(None, serialization_alias='TimerPanelImage')
    date: Optional[str] = Field(None, serialization_alias='Date')
    time: Optional[str] = Field(None, serialization_alias='Time')
    responses: List[ResponseSchema] = Field(default_factory=list, serialization_alias='Response')

    model_config = ConfigDict(from_attributes=True)


class WardCountSchema(BaseModel):
    ward_committee: Optional[str] = Field(None, serialization_alias='wardCommittee')
    count: int


def serialize_application(record) -> Dict[str, Any]:
    """Serialize an ApplicationRecord to its wire representation."""
    return ApplicationSchema.model_validate(record).model_dump(mode='json', by_alias=True)


def serialize_ward_counts(rows) -> List[Dict[str, Any]]:
    """Serialize (ward, count) rows to ``[{wardCommittee, count}]``."""
    return [
        WardCountSchema(ward_committee=ward, count=count).model_dump(mode='json', by_alias=True)
        for ward, count in rows
    ]
