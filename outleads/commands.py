import click
from flask.cli import with_appcontext
from outleads.extensions import db
from outleads.models import Role, User, UserStatus
from outleads.services.dispositions import seed_dispositions
from outleads.services.permissions import seed_permissions


@click.command('seed-dispositions')
@with_appcontext
def seed_dispositions_command():
    """Insert the default first, second and third level dispositions."""
    created = seed_dispositions()
    click.echo(f"Seeded {created} disposition(s)")


@click.command('seed-permissions')
@with_appcontext
def seed_permissions_command():
    """Insert the default permission list."""
    created = seed_permissions()
    click.echo(f"Seeded {created} permission(s)")


@click.command('create-admin')
@click.option('--email', required=True)
@click.option('--username', default=None, help='Defaults to the email address')
@click.option('--name', default=None)
@click.password_option()
@with_appcontext
def create_admin_command(email, username, name, password):
    """Create an active ADMIN account with a local password."""
    if User.query.filter((User.email == email) | (User.username == (username or email))).first():
        raise click.ClickException(f"A user with email or username {username or email} already exists")

    user = User(email=email, username=username or email, name=name, role=Role.ADMIN, status=UserStatus.ACTIVE)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    click.echo(f"Created admin {user.username} ({user.id})")


def register_commands(app):
    app.cli.add_command(seed_dispositions_command)
    app.cli.add_command(seed_permissions_command)
    app.cli.add_command(create_admin_command)
