"""Sectors, products, product categories and SBUs: admin CRUD plus cached public lists."""

from flask import Blueprint
from sqlalchemy import func
from outleads.extensions import db
from outleads.models import Product, ProductCategory, Role, Sbu, Sector
from outleads.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    NamedCreate,
    NamedUpdate,
    ProductCreate,
    ProductUpdate,
)
from outleads.services.caching import get_cache, invalidator
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import create_success_response

catalog_bp = Blueprint('catalog', __name__)

CATALOG_READ_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.BSS]
CATALOG_WRITE_ROLES = [Role.ADMIN]


def _catalog_crud(model, entity_name, resource, create_schema, update_schema, search_fields=('name',)):
    invalidate = invalidator(resource)
    return CrudConfig(
        model=model,
        entity_name=entity_name,
        create_schema=create_schema,
        update_schema=update_schema,
        order_by=('name', 'asc'),
        search_fields=search_fields,
        after_create=invalidate,
        after_update=invalidate,
        after_delete=invalidate,
    )


CATALOG = {
    'sectors': (Sector, _catalog_crud(Sector, 'Sector', 'sectors', NamedCreate, NamedUpdate)),
    'products': (Product, _catalog_crud(Product, 'Product', 'products', ProductCreate, ProductUpdate,
                                        search_fields=('name', 'description'))),
    'sbus': (Sbu, _catalog_crud(Sbu, 'SBU', 'sbus', NamedCreate, NamedUpdate)),
}

for _resource, (_model, _config) in CATALOG.items():
    register_crud_routes(catalog_bp, f'/admin/{_resource}', _config,
                         read_roles=CATALOG_READ_ROLES, write_roles=CATALOG_WRITE_ROLES)


def serialize_category(category):
    product_count = (db.session.query(func.count(Product.id))
                     .filter(Product.category_id == category.id)
                     .scalar())
    return category.to_dict(product_count=product_count)


product_category_crud = CrudConfig(
    model=ProductCategory,
    entity_name='Product category',
    create_schema=CategoryCreate,
    update_schema=CategoryUpdate,
    order_by=('name', 'asc'),
    search_fields=('name', 'description'),
    serializer=serialize_category,
)

# Categories are an admin-only taxonomy with no public list
register_crud_routes(catalog_bp, '/admin/product-categories', product_category_crud,
                     read_roles=CATALOG_WRITE_ROLES)


def _public_list(resource):
    model, _ = CATALOG[resource]
    cache = get_cache()
    items = cache.get_or_load(
        cache.make_key(resource, 'all'),
        lambda: [row.to_dict() for row in model.query.order_by(model.name).all()],
    )
    return create_success_response(items)


@catalog_bp.route('/sectors', methods=['GET'])
def public_sectors():
    return _public_list('sectors')


@catalog_bp.route('/products', methods=['GET'])
def public_products():
    return _public_list('products')


@catalog_bp.route('/sbus', methods=['GET'])
def public_sbus():
    return _public_list('sbus')
