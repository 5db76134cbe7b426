# storeadmin/cli.py
from datetime import timedelta

import click
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from .extensions import db
from .model import User
from .utils.decorators import ROLE_LEVEL


@click.command("create-admin")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
@click.option("--role", default="admin", type=click.Choice(sorted(ROLE_LEVEL)))
def create_admin(email, password, name, role):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists")
        return
    u = User(email=email, name=name, password_hash=generate_password_hash(password), role=role)
    db.session.add(u)
    db.session.commit()
    click.echo(f"User created: {u.id} {u.email} ({u.role})")


@click.command("issue-token")
@click.option("--email", required=True)
@click.option("--hours", default=24, show_default=True, type=int)
def issue_token(email, hours):
    """Print an access token for a dashboard user."""
    u = User.query.filter_by(email=email.strip().lower()).first()
    if not u:
        raise click.ClickException("No such user")
    click.echo(create_access_token(identity=str(u.id), expires_delta=timedelta(hours=hours)))


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(issue_token)
