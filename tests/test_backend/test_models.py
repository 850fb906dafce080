"""Tests for backend database models."""
import pytest
from sqlalchemy.exc import IntegrityError
from backend.models import db, ApplicationRecord, ResponseRecord


def make_application(consumer_id='C1', application_id='A-1', **fields):
    record = ApplicationRecord(consumer_id=consumer_id, application_id=application_id, **fields)
    db.session.add(record)
    db.session.commit()
    return record


def test_application_model_creation(app):
    """Test creating an application record."""
    with app.app_context():
        record = make_application(
            ward_committee='Ward 1',
            meter_latitude=12.97,
            meter_longitude=77.59,
            timer_panel=False,
            date='2024-03-05',
            time='10:15:00',
        )

        assert record.id is not None
        assert record.timer_panel is False
        assert record.responses == []


def test_consumer_id_is_unique(app):
    with app.app_context():
        make_application('C1', 'A-1')
        with pytest.raises(IntegrityError):
            make_application('C1', 'A-2')
        db.session.rollback()


def test_application_id_is_unique(app):
    with app.app_context():
        make_application('C1', 'A-1')
        with pytest.raises(IntegrityError):
            make_application('C2', 'A-1')
        db.session.rollback()


@pytest.mark.parametrize('fields', [
    {'meter_latitude': 90.5},
    {'meter_longitude': -180.5},
])
def test_meter_coordinates_are_range_checked(app, fields):
    with app.app_context():
        with pytest.raises(IntegrityError):
            make_application(**fields)
        db.session.rollback()


def test_responses_keep_position_order(app):
    """Test that appended responses are numbered and reloaded in order."""
    with app.app_context():
        record = make_application()
        for index, ward in enumerate(['North', 'South', 'East']):
            record.responses.append(ResponseRecord(id=f'r{index}', ward_committee=ward, consumer_id='C1'))
        db.session.commit()

        record.responses.insert(0, ResponseRecord(id='r-first', ward_committee='West', consumer_id='C1'))
        db.session.commit()
        db.session.expire_all()

        reloaded = db.session.get(ApplicationRecord, record.id)
        assert [r.ward_committee for r in reloaded.responses] == ['West', 'North', 'South', 'East']
        assert [r.position for r in reloaded.responses] == [0, 1, 2, 3]
        assert reloaded.responses[0].application is reloaded


def test_response_descriptors_round_trip_as_json(app):
    with app.app_context():
        record = make_application()
        record.responses.append(ResponseRecord(
            id='r1',
            type_of_pole={'PoleName': 'P-1', 'HightofPole': '9m'},
            types_of_cable={'CableType': 'Overhead'},
        ))
        db.session.commit()
        db.session.expire_all()

        response = db.session.get(ResponseRecord, 'r1')
        assert response.type_of_pole == {'PoleName': 'P-1', 'HightofPole': '9m'}
        assert response.types_of_cable == {'CableType': 'Overhead'}
        assert response.type_of_light is None


def test_negative_light_count_rejected(app):
    with app.app_context():
        record = make_application()
        record.responses.append(ResponseRecord(id='r1', number_light=-1))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()


def test_deleting_application_deletes_responses(app):
    with app.app_context():
        record = make_application()
        record.responses.append(ResponseRecord(id='r1'))
        record.responses.append(ResponseRecord(id='r2'))
        db.session.commit()

        db.session.delete(record)
        db.session.commit()

        assert db.session.query(ResponseRecord).count() == 0
