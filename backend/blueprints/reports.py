"""Reports blueprint: ward counts and date queries."""
from flask import Blueprint, request
from shared.enums import GroupField
from shared.models import today
from shared.schemas import serialize_application, serialize_ward_counts
from shared.validation import Validator, ValidationError
from ..base.crud_base import CRUDBase
from ..utils import api_error, get_repository

bp = Blueprint('reports', __name__, url_prefix='/api/reports')


class ReportHandler(CRUDBase):
    """Read-only aggregate and date-filtered queries."""

    def __init__(self):
        super().__init__(logger_name='reports')

    def ward_count(self, field_path):
        def operation():
            rows = get_repository().count_grouped_by(field_path)
            return self.respond(serialize_ward_counts(rows))

        return self.run(f'count by {field_path}', operation)

    def records_for_date(self, date):
        def operation():
            records = get_repository().find_by_date(date)
            return self.respond([serialize_application(r) for r in records])

        return self.run('query records by date', operation)

    def records_for_month(self, year, month):
        def operation():
            records = get_repository().find_by_year_month(year, month)
            self.logger.debug(f"{len(records)} records for {year}-{month:02d}")
            return self.respond([serialize_application(r) for r in records])

        return self.run('query records by month', operation)


report_handler = ReportHandler()


@bp.route('/ward-count', methods=['GET'])
def ward_count():
    """Count applications per ward committee."""
    return report_handler.ward_count(GroupField.WARD.value)


@bp.route('/ward-response-count', methods=['GET'])
def ward_response_count():
    """Count survey responses per ward committee across all applications."""
    return report_handler.ward_count(GroupField.RESPONSE_WARD.value)


@bp.route('/today', methods=['GET'])
def data_for_today():
    """Get applications created today (application timezone)."""
    return report_handler.records_for_date(today())


@bp.route('/by-month', methods=['GET'])
def data_for_month():
    """Get applications created in ``?year=YYYY&month=M``."""
    try:
        year, month = Validator.validate_year_month(
            request.args.get('year'), request.args.get('month')
        )
    except ValidationError as e:
        return api_error(str(e), 400, error=str(e))
    return report_handler.records_for_month(year, month)
