"""Applications blueprint for Flask API."""
from flask import Blueprint
from shared.schemas import ApplicationCreate, ApplicationUpdate, ResponseCreate, serialize_application
from ..base.crud_base import CRUDBase
from ..exceptions import NotFoundError
from ..services.application_service import create_application
from ..services.image_store import get_image_store
from ..services.response_manager import append_response, remove_response
from ..services.update_reconciler import reconcile
from ..utils import get_repository

bp = Blueprint('applications', __name__, url_prefix='/api')


class ApplicationCRUD(CRUDBase):
    """Handlers for application records and their responses."""

    def __init__(self):
        super().__init__(logger_name='applications')

    def create(self):
        """Create an application from the JSON body."""
        def operation():
            payload = self.parse(ApplicationCreate, self.get_json_data())
            record = create_application(get_repository(), get_image_store(), payload)
            self.logger.info(f"Created application {record.application_id} - {record.consumer_id}")
            return self.respond({
                'message': 'Data saved successfully',
                'data': serialize_application(record),
            }, 201)

        return self.run('create application', operation,
                        internal='Encountered an unexpected condition.')

    def get_list(self):
        def operation():
            records = get_repository().find_all()
            return self.respond([serialize_application(r) for r in records])

        return self.run('list applications', operation)

    def get_detail(self, consumer_id):
        def operation():
            record = get_repository().find_by_consumer_id(consumer_id)
            if record is None:
                raise NotFoundError()
            return self.respond(serialize_application(record))

        return self.run('get application', operation)

    def delete(self, consumer_id):
        def operation():
            deleted = get_repository().delete_by_consumer_id(consumer_id)
            if deleted is None:
                raise NotFoundError()
            return self.respond({
                'message': 'Data deleted successfully',
                'data': serialize_application(deleted),
            })

        return self.run('delete application', operation)

    def update(self, consumer_id):
        """Merge a partial document into an application, replacing images."""
        def operation():
            update = self.parse(ApplicationUpdate, self.get_json_data())
            record = reconcile(get_repository(), get_image_store(), consumer_id, update)
            return self.respond(serialize_application(record))

        return self.run('update application', operation,
                        not_found='Document not found',
                        invalid='Error updating document')

    def add_response(self, consumer_id):
        def operation():
            payload = self.parse(ResponseCreate, self.get_json_data())
            record = append_response(get_repository(), get_image_store(), consumer_id, payload)
            return self.respond({
                'message': 'Response data added successfully',
                'data': serialize_application(record),
            })

        return self.run('add response', operation, not_found='Consumer ID not found')

    def delete_response(self, consumer_id, response_id):
        def operation():
            record = remove_response(get_repository(), get_image_store(), consumer_id, response_id)
            return self.respond({
                'message': 'Response deleted successfully',
                'data': serialize_application(record),
            })

        return self.run('delete response', operation, not_found='Consumer ID or Response not found')


application_crud = ApplicationCRUD()


@bp.route('/applications', methods=['POST'])
def add_application():
    """Create a new application."""
    return application_crud.create()


@bp.route('/applications', methods=['GET'])
def get_applications():
    """Get all applications."""
    return application_crud.get_list()


@bp.route('/applications/<consumer_id>', methods=['GET'])
def get_application(consumer_id):
    """Get a single application by ConsumerID."""
    return application_crud.get_detail(consumer_id)


@bp.route('/applications/<consumer_id>', methods=['PUT'])
def update_application(consumer_id):
    """Update an application by ConsumerID."""
    return application_crud.update(consumer_id)


@bp.route('/applications/<consumer_id>', methods=['DELETE'])
def delete_application(consumer_id):
    """Delete an application by ConsumerID."""
    return application_crud.delete(consumer_id)


@bp.route('/applications/<consumer_id>/responses', methods=['POST'])
def add_response(consumer_id):
    """Append a survey response to an application."""
    return application_crud.add_response(consumer_id)


@bp.route('/applications/<consumer_id>/responses/<response_id>', methods=['DELETE'])
def delete_response(consumer_id, response_id):
    """Remove a survey response from an application."""
    return application_crud.delete_response(consumer_id, response_id)
