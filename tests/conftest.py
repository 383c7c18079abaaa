"""
Pytest configuration and fixtures for the Outleads API tests.

This module provides:
- A fresh application with an in-memory database per test
- Flask test client and CLI runner
- User factories and bearer-token headers
- Common catalog, campaign and disposition data
"""

import itertools
import pytest

from outleads.main import create_app
from outleads.extensions import db
from outleads.auth.tokens import issue_access_token
from outleads.models import (
    Campaign,
    DispositionCategory,
    FirstLevelDisposition,
    Lead,
    LeadPool,
    Product,
    Role,
    Sbu,
    SecondLevelDisposition,
    Sector,
    ThirdLevelDisposition,
    User,
    UserStatus,
)


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def db_session(app):
    """Database session for tests."""
    yield db.session


@pytest.fixture
def make_user(db_session):
    """Factory creating users; every call gets a unique email and username."""
    counter = itertools.count(1)

    def _make_user(role=Role.AGENT, status=UserStatus.ACTIVE, password=None, **kwargs):
        n = next(counter)
        prefix = role.value.lower()
        user = User(
            email=kwargs.pop('email', f'{prefix}{n}@example.com'),
            username=kwargs.pop('username', f'{prefix}{n}'),
            name=kwargs.pop('name', f'{role.value.title()} {n}'),
            role=role,
            status=status,
            **kwargs,
        )
        if password:
            user.set_password(password)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user(Role.ADMIN)


@pytest.fixture
def supervisor_user(make_user):
    return make_user(Role.SUPERVISOR)


@pytest.fixture
def agent_user(make_user):
    return make_user(Role.AGENT)


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header carrying a fresh access token for a user."""
    def _auth_headers(user):
        return {'Authorization': f'Bearer {issue_access_token(user)}'}
    return _auth_headers


@pytest.fixture
def sample_sbu(db_session):
    sbu = Sbu(name='Enterprise')
    db_session.add(sbu)
    db_session.commit()
    return sbu


@pytest.fixture
def sample_sector(db_session):
    sector = Sector(name='Retail')
    db_session.add(sector)
    db_session.commit()
    return sector


@pytest.fixture
def sample_product(db_session):
    product = Product(name='Fibre Internet', description='Business fibre')
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture
def sample_campaign(db_session, admin_user, agent_user):
    campaign = Campaign(
        campaign_name='Spring Promo',
        organization_name='Acme',
        unique_link='springpromo',
        created_by_id=admin_user.id,
        assigned_to_id=agent_user.id,
    )
    db_session.add(campaign)
    db_session.commit()
    return campaign


@pytest.fixture
def sample_pool(db_session, sample_campaign, admin_user):
    pool = LeadPool(name='March upload', campaign_id=sample_campaign.id, created_by_id=admin_user.id)
    db_session.add(pool)
    db_session.commit()
    return pool


@pytest.fixture
def make_lead(db_session, sample_sector):
    counter = itertools.count(1)

    def _make_lead(**kwargs):
        n = next(counter)
        lead = Lead(
            full_name=kwargs.pop('full_name', f'Lead {n}'),
            phone_number=kwargs.pop('phone_number', f'+27100000{n:03d}'),
            sector_id=kwargs.pop('sector_id', sample_sector.id),
            **kwargs,
        )
        db_session.add(lead)
        db_session.commit()
        return lead

    return _make_lead


@pytest.fixture
def dispositions(db_session):
    """A minimal disposition tree."""
    contacted = FirstLevelDisposition(name='Contacted')
    not_contacted = FirstLevelDisposition(name='Not Contacted')
    sale = SecondLevelDisposition(name='Sale')
    no_sale = SecondLevelDisposition(name='No Sale')
    price = ThirdLevelDisposition(name='Price Too High', category=DispositionCategory.NO_SALE)
    no_answer = ThirdLevelDisposition(name='No Answer', category=DispositionCategory.NOT_CONTACTED)
    db_session.add_all([contacted, not_contacted, sale, no_sale, price, no_answer])
    db_session.commit()
    return {
        'contacted': contacted,
        'not_contacted': not_contacted,
        'sale': sale,
        'no_sale': no_sale,
        'price': price,
        'no_answer': no_answer,
    }
