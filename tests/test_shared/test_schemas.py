"""Tests for request and response schemas."""
import pytest
from pydantic import ValidationError as PydanticValidationError
from shared.models import ApplicationRecord, ResponseRecord
from shared.schemas import (
    ApplicationCreate, ApplicationUpdate, ResponseCreate, ApplicationSchema,
    serialize_application, serialize_ward_counts,
)
from shared.validation import ValidationError


class TestApplicationCreate:

    def test_wire_names_map_to_columns(self):
        payload = ApplicationCreate.model_validate({
            'ConsumerID': ' C1 ',
            'WardCommittee': 'Ward 1',
            'NewMeterNumber': 12345,
            'SanctionLoad': 2.5,
            'MeterLatitude': '12.97',
            'TimerPanel': True,
            'MeterImage': 'abc',
            'Unknown': 'ignored',
        })

        assert payload.record_fields() == {
            'consumer_id': 'C1',
            'ward_committee': 'Ward 1',
            'new_meter_number': '12345',
            'purpose': None,
            'type': None,
            'address': None,
            'meter_latitude': 12.97,
            'meter_longitude': None,
            'sanction_load': '2.5',
            'timer_panel': True,
        }
        assert payload.meter_image == 'abc'

    def test_snake_case_names_accepted(self):
        assert ApplicationCreate(consumer_id='C1').consumer_id == 'C1'

    def test_consumer_id_required(self):
        with pytest.raises(PydanticValidationError):
            ApplicationCreate.model_validate({'WardCommittee': 'A'})

    def test_address_markup_stripped(self):
        payload = ApplicationCreate.model_validate({'ConsumerID': 'C1', 'Address': '<i>Main</i> Road'})
        assert payload.address == 'Main Road'

    def test_coordinate_out_of_range(self):
        with pytest.raises(ValidationError, match='MeterLatitude'):
            ApplicationCreate.model_validate({'ConsumerID': 'C1', 'MeterLatitude': -91})


class TestResponseCreate:

    def test_flat_fields_nest_into_descriptors(self):
        payload = ResponseCreate.model_validate({
            'WardCommittee': 'North',
            'PoleName': 'P-1',
            'LightName': 'LED',
            'Watts': 40,
            'CableType': 'Overhead',
            'NumberLight': '3',
        })

        fields = payload.record_fields()
        assert fields['type_of_pole'] == {
            'PoleName': 'P-1', 'HightofPole': None, 'TypeofBracket': None, 'Bracket': None,
        }
        assert fields['type_of_light'] == {'LightName': 'LED', 'Watts': '40'}
        assert fields['types_of_cable']['CableType'] == 'Overhead'
        assert fields['number_light'] == 3
        assert 'pole_image_data' not in fields

    def test_negative_light_count_rejected(self):
        with pytest.raises(PydanticValidationError):
            ResponseCreate.model_validate({'NumberLight': -1})


class TestApplicationUpdate:

    def test_only_supplied_fields_are_applied(self):
        update = ApplicationUpdate.model_validate({'Address': 'New', 'TimerPanel': False})
        assert update.scalar_fields() == {'address': 'New', 'timer_panel': False}
        assert update.responses is None

    def test_explicit_null_is_applied(self):
        update = ApplicationUpdate.model_validate({'Purpose': None})
        assert update.scalar_fields() == {'purpose': None}

    def test_identifiers_are_dropped(self):
        update = ApplicationUpdate.model_validate({'ConsumerID': 'C2', 'ApplicationID': 'X'})
        assert update.scalar_fields() == {}

    def test_response_entries_parse_stored_shape(self):
        update = ApplicationUpdate.model_validate({'Response': [{
            '_id': 'abc',
            'TypeofPole': {'PoleName': 'P-1', 'HightofPole': 9},
            'PoleImageData': 'poleImage_C1_0.png',
            'Date': '2024-01-01',
        }]})

        entry = update.responses[0]
        assert entry.id == 'abc'
        assert entry.pole_image_data == 'poleImage_C1_0.png'
        assert entry.record_fields()['type_of_pole']['HightofPole'] == '9'
        assert entry.record_fields()['type_of_light'] is None


class TestSerialization:

    def make_record(self):
        record = ApplicationRecord(
            application_id='A-1', consumer_id='C1', ward_committee='Ward 1',
            meter_latitude=12.5, timer_panel=True, date='2024-03-05', time='10:00:00',
        )
        record.responses.append(ResponseRecord(
            id='r1', consumer_id='C1', ward_committee='North',
            type_of_light={'LightName': 'LED', 'Watts': '40'}, number_light=2,
        ))
        return record

    def test_serialize_application_uses_wire_names(self):
        data = serialize_application(self.make_record())

        assert data['ApplicationID'] == 'A-1'
        assert data['ConsumerID'] == 'C1'
        assert data['MeterLatitude'] == 12.5
        assert data['TimerPanel'] is True
        assert data['MeterImageData'] is None
        assert data['Date'] == '2024-03-05'
        assert data['Response'][0]['_id'] == 'r1'
        assert data['Response'][0]['TypeofLight'] == {'LightName': 'LED', 'Watts': '40'}
        assert data['Response'][0]['NumberLight'] == 2
        assert 'id' not in data

    def test_snapshot_serializes_like_record(self):
        record = self.make_record()
        snapshot = ApplicationSchema.model_validate(record)
        assert serialize_application(snapshot) == serialize_application(record)

    def test_serialize_ward_counts(self):
        assert serialize_ward_counts([('A', 2), (None, 1)]) == [
            {'wardCommittee': 'A', 'count': 2},
            {'wardCommittee': None, 'count': 1},
        ]
