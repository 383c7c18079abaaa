"""
Configuration driven CRUD handlers.

A ``CrudConfig`` describes one entity (model, schemas, search/sort/filter
settings and hooks). ``make_crud_handlers`` turns it into list/get/create/
update/delete view functions with shared pagination, validation and error
envelopes, and ``register_crud_routes`` mounts them on a blueprint behind
the role gate.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Sequence
from flask import current_app, g, request
from sqlalchemy.exc import IntegrityError
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.schemas import validate_payload
from outleads.utils.error_handling import (
    APIError,
    Conflict,
    ValidationError,
    create_success_response,
    handle_internal_error,
    not_found,
)
from outleads.utils.pagination import apply_search, apply_sort, paginate, parse_page_params

logger = logging.getLogger(__name__)


def reject_null_columns(model, data, schema=None):
    """Refuse explicit nulls for NOT NULL columns before they reach the database."""
    columns = model.__table__.columns
    for key, value in data.items():
        if value is None and key in columns and not columns[key].nullable:
            field_info = schema.model_fields.get(key) if schema is not None else None
            name = field_info.alias if field_info is not None and field_info.alias else key
            raise ValidationError(f"{name}: may not be null")


@dataclass
class CrudConfig:
    model: Any
    entity_name: str
    create_schema: Any = None
    update_schema: Any = None
    include_relations: Sequence[str] = ()
    # (field, direction) or a list of such pairs
    order_by: Any = ('created_at', 'desc')
    search_fields: Sequence[str] = ()
    # query parameter name -> column name, exact match
    filter_fields: Dict[str, str] = field(default_factory=dict)
    # (query, user) -> query; restricts what the acting user may see
    scope: Optional[Callable] = None
    before_create: Optional[Callable] = None
    before_update: Optional[Callable] = None
    can_delete: Optional[Callable] = None
    after_create: Optional[Callable] = None
    after_update: Optional[Callable] = None
    after_delete: Optional[Callable] = None
    serializer: Optional[Callable] = None

    def serialize(self, row):
        if self.serializer is not None:
            return self.serializer(row)
        if self.include_relations:
            return row.to_dict(include=self.include_relations)
        return row.to_dict()


@dataclass
class CrudHandlers:
    list: Callable
    get: Callable
    create: Callable
    update: Callable
    delete: Callable


def _acting_user_id():
    user = g.get('current_user')
    return user.id if user is not None else None


def _guarded(config: CrudConfig, operation: str, view):
    """Convert unexpected failures into the generic 500 envelope with context."""
    def wrapped(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except (APIError, IntegrityError):
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            return handle_internal_error(e, f"{config.entity_name} {operation}",
                                         entity=config.entity_name, user_id=_acting_user_id())

    wrapped.__name__ = f"{config.model.__tablename__}_{operation}"
    return wrapped


def make_crud_handlers(config: CrudConfig) -> CrudHandlers:
    model = config.model

    def base_query():
        query = model.query
        if config.scope is not None:
            query = config.scope(query, g.get('current_user'))
        return query

    def fetch(item_id):
        row = base_query().filter(model.id == item_id).first()
        if row is None:
            raise not_found(config.entity_name, item_id)
        return row

    def list_items():
        params = parse_page_params(request.args,
                                   default_limit=current_app.config.get('DEFAULT_PAGE_SIZE', 10),
                                   max_limit=current_app.config.get('MAX_PAGE_SIZE', 100))
        query = base_query()
        for arg_name, column_name in config.filter_fields.items():
            value = request.args.get(arg_name)
            if value:
                query = query.filter(getattr(model, column_name) == value)
        query = apply_search(query, model, config.search_fields, params.search)
        query = apply_sort(query, model, params.sort_by, params.sort_order, config.order_by)
        rows, meta = paginate(query, params)
        return create_success_response([config.serialize(row) for row in rows], meta)

    def get_item(item_id):
        return create_success_response(config.serialize(fetch(item_id)))

    def create_item():
        data = validate_payload(config.create_schema, request.get_json(silent=True))
        if config.before_create is not None:
            data = config.before_create(data, g.get('current_user'))
        reject_null_columns(model, data, config.create_schema)

        row = model(**data)
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.info(f"Rejected {config.entity_name} create: {e.orig}")
            raise Conflict(f"{config.entity_name} already exists or references a missing record")

        logger.info(f"Created {config.entity_name} {row.id} by user {_acting_user_id()}")
        if config.after_create is not None:
            config.after_create(row)
        return create_success_response(config.serialize(row), status_code=201)

    def update_item(item_id):
        row = fetch(item_id)
        data = validate_payload(config.update_schema, request.get_json(silent=True), partial=True)
        if config.before_update is not None:
            data = config.before_update(row, data, g.get('current_user'))
        reject_null_columns(model, data, config.update_schema)

        for key, value in data.items():
            setattr(row, key, value)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.info(f"Rejected {config.entity_name} update {item_id}: {e.orig}")
            raise Conflict(f"{config.entity_name} update conflicts with an existing record")

        if config.after_update is not None:
            config.after_update(row)
        return create_success_response(config.serialize(row))

    def delete_item(item_id):
        row = fetch(item_id)
        if config.can_delete is not None and not config.can_delete(row):
            raise Conflict(f"{config.entity_name} cannot be deleted")

        db.session.delete(row)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.info(f"Blocked {config.entity_name} delete {item_id}: {e.orig}")
            raise Conflict(f"{config.entity_name} is still referenced by other records")

        logger.info(f"Deleted {config.entity_name} {item_id} by user {_acting_user_id()}")
        if config.after_delete is not None:
            config.after_delete(row)
        return '', 204

    return CrudHandlers(
        list=_guarded(config, 'list', list_items),
        get=_guarded(config, 'get', get_item),
        create=_guarded(config, 'create', create_item),
        update=_guarded(config, 'update', update_item),
        delete=_guarded(config, 'delete', delete_item),
    )


def register_crud_routes(blueprint, rule: str, config: CrudConfig,
                         read_roles: Iterable, write_roles: Optional[Iterable] = None,
                         operations: Iterable[str] = ('list', 'get', 'create', 'update', 'delete')):
    """Mount the factory's handlers at ``rule`` and ``rule/<id>``."""
    handlers = make_crud_handlers(config)
    write_roles = read_roles if write_roles is None else write_roles
    operations = set(operations)
    name = config.model.__tablename__

    routes = [
        ('list', rule, 'GET', read_roles),
        ('create', rule, 'POST', write_roles),
        ('get', f"{rule}/<item_id>", 'GET', read_roles),
        ('update', f"{rule}/<item_id>", 'PUT', write_roles),
        ('delete', f"{rule}/<item_id>", 'DELETE', write_roles),
    ]
    for operation, url, method, roles in routes:
        if operation in operations:
            blueprint.add_url_rule(url, endpoint=f"{name}_{operation}",
                                   view_func=protect(roles, getattr(handlers, operation)),
                                   methods=[method])
    return handlers
