from flask import Blueprint
from outleads.auth.gate import protect
from outleads.models import FirstLevelDisposition, Role, SecondLevelDisposition, ThirdLevelDisposition
from outleads.schemas.disposition import SecondLevelCreate, SecondLevelUpdate, ThirdLevelCreate, ThirdLevelUpdate
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import create_success_response

disposition_bp = Blueprint('disposition', __name__)

READ_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.AGENT]
WRITE_ROLES = [Role.ADMIN]


@disposition_bp.route('/first-level', methods=['GET'])
@protect(READ_ROLES)
def list_first_level():
    dispositions = FirstLevelDisposition.query.order_by(FirstLevelDisposition.name).all()
    return create_success_response([disposition.to_dict() for disposition in dispositions])


second_level_crud = CrudConfig(
    model=SecondLevelDisposition,
    entity_name='Second level disposition',
    create_schema=SecondLevelCreate,
    update_schema=SecondLevelUpdate,
    order_by=('name', 'asc'),
    search_fields=('name', 'description'),
)

third_level_crud = CrudConfig(
    model=ThirdLevelDisposition,
    entity_name='Third level disposition',
    create_schema=ThirdLevelCreate,
    update_schema=ThirdLevelUpdate,
    order_by=[('category', 'asc'), ('name', 'asc')],
    search_fields=('name', 'description'),
    filter_fields={'category': 'category'},
)

register_crud_routes(disposition_bp, '/second-level', second_level_crud,
                     read_roles=READ_ROLES, write_roles=WRITE_ROLES)
register_crud_routes(disposition_bp, '/third-level', third_level_crud,
                     read_roles=READ_ROLES, write_roles=WRITE_ROLES)
