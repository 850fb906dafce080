from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Boolean, Text, ForeignKey, Index, CheckConstraint, JSON
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.ext.orderinglist import ordering_list

Base = declarative_base()

# Global timezone configuration - India Standard Time
# Creation dates are captured in this zone and stored as plain strings,
# so every date query compares against strings formatted in the same zone.
from zoneinfo import ZoneInfo
APP_TIMEZONE = ZoneInfo('Asia/Kolkata')

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M:%S'


def now():
    """Return current datetime in application timezone (timezone-aware)."""
    return datetime.now(APP_TIMEZONE)


def current_date_time():
    """Return the current (date, time) strings as stored on records."""
    moment = now()
    return moment.strftime(DATE_FORMAT), moment.strftime(TIME_FORMAT)


def today():
    """Return today's date string in the application timezone."""
    return now().strftime(DATE_FORMAT)


class ApplicationRecord(Base):
    """One meter-installation application."""
    __tablename__ = 'applications'
    id = Column(Integer, primary_key=True, nullable=False)
    application_id = Column(String(36), nullable=False, unique=True)
    consumer_id = Column(String(100), nullable=False, unique=True)
    ward_committee = Column(String(200), index=True)
    new_meter_number = Column(String(100))
    purpose = Column(String(200))
    type = Column(String(100))
    address = Column(Text)
    meter_latitude = Column(Float)
    meter_longitude = Column(Float)
    sanction_load = Column(String(50))
    timer_panel = Column(Boolean)
    meter_image_data = Column(String(255))
    timer_panel_image = Column(String(255))
    date = Column(String(10), index=True)
    time = Column(String(8))
    responses = relationship(
        'ResponseRecord',
        backref='application',
        order_by='ResponseRecord.position',
        collection_class=ordering_list('position'),
        cascade='all, delete-orphan',
        lazy='select',
    )

    __table_args__ = (
        CheckConstraint('meter_latitude IS NULL OR (meter_latitude >= -90.0 AND meter_latitude <= 90.0)',
                        name='chk_meter_latitude_range'),
        CheckConstraint('meter_longitude IS NULL OR (meter_longitude >= -180.0 AND meter_longitude <= 180.0)',
                        name='chk_meter_longitude_range'),
    )


class ResponseRecord(Base):
    """One field-survey entry owned by an application."""
    __tablename__ = 'application_response'
    id = Column(String(32), primary_key=True, nullable=False)
    application_pk = Column(Integer, ForeignKey('applications.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    ward_committee = Column(String(200), index=True)
    consumer_id = Column(String(100))
    type_of_pole = Column(JSON)
    type_of_light = Column(JSON)
    number_light = Column(Integer)
    pole_image_data = Column(String(255))
    pole_latitude = Column(Float)
    pole_longitude = Column(Float)
    types_of_cable = Column(JSON)
    date = Column(String(10))
    time = Column(String(8))

    __table_args__ = (
        CheckConstraint('pole_latitude IS NULL OR (pole_latitude >= -90.0 AND pole_latitude <= 90.0)',
                        name='chk_pole_latitude_range'),
        CheckConstraint('pole_longitude IS NULL OR (pole_longitude >= -180.0 AND pole_longitude <= 180.0)',
                        name='chk_pole_longitude_range'),
        CheckConstraint('number_light IS NULL OR number_light >= 0', name='chk_number_light_non_negative'),
    )

Index('idx_response_application_position', ResponseRecord.application_pk, ResponseRecord.position)
