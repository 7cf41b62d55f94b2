# Overview: Flask CLI command groups for bootstrap, reference data and quick reports.

# backend/app/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: creates the workbook and missing sheets, seeds default clinics.
#
# Clinics:
# - python -m flask clinics list
# - python -m flask clinics create --id north --name "North Clinic"
#
# Admin accounts:
# - python -m flask admins list
# - python -m flask admins create --username boss --role superadmin
# - python -m flask admins create --username nurse --role admin --clinic-id main
#   Prompts for the password if --password is omitted.
#
# Reports:
# - python -m flask report stock

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import InventoryError, StorageError
from .extensions import get_store
from .models import ROLES
from .services import auth_service, clinic_service, reporting_service


@click.group('system')
def system_group():
    """Workbook bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create the workbook and any missing sheets, then seed default clinics."""
    store = get_store()
    click.echo(f"START Initializing workbook {store.path}")
    try:
        store.initialize()
        added = clinic_service.seed_default_clinics(store, current_app.config["DEFAULT_CLINICS"])
    except StorageError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Sheets: {', '.join(store.schemas)}")
    click.echo(f"PASS Default clinics added: {added}")


@click.group('clinics')
def clinics_group():
    """Clinic reference data."""


@clinics_group.command('list')
@with_appcontext
def list_clinics():
    clinics = clinic_service.list_clinics(get_store())
    if not clinics:
        click.echo("No clinics found.")
        return
    for clinic in clinics:
        click.echo(f"{clinic.id:<16} {clinic.name}")


@clinics_group.command('create')
@click.option('--id', 'clinic_id', required=True, help='Clinic id (no spaces)')
@click.option('--name', required=True, help='Display name')
@with_appcontext
def create_clinic(clinic_id, name):
    try:
        clinic = clinic_service.add_clinic(get_store(), clinic_id, name)
    except (InventoryError, StorageError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created clinic {clinic.id} ({clinic.name})")


@click.group('admins')
def admins_group():
    """Admin login accounts."""


@admins_group.command('list')
@with_appcontext
def list_admins():
    admins = auth_service.list_admins(get_store())
    if not admins:
        click.echo("No admin accounts found.")
        return
    for admin in admins:
        click.echo(f"{admin.username:<20} {admin.role:<11} {admin.clinic_id or '-'}")


@admins_group.command('create')
@click.option('--username', prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', type=click.Choice(ROLES), default='admin', show_default=True)
@click.option('--clinic-id', default=None, help='Required for role "admin"')
@with_appcontext
def create_admin(username, password, role, clinic_id):
    try:
        admin = auth_service.create_admin(get_store(), username, password, role=role, clinic_id=clinic_id)
    except (InventoryError, StorageError) as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Created {admin.role} '{admin.username}'")


@click.group('report')
def report_group():
    """Print reports to the terminal."""


@report_group.command('stock')
@with_appcontext
def stock_report():
    dashboard = reporting_service.build_stock_dashboard(get_store())
    if dashboard["is_empty"]:
        click.echo(dashboard["message"])
        return
    click.echo(f"{'Medicine':<30} {'On hand':>8} {'Used':>8} {'Remaining':>10}")
    for row in dashboard["medicines"]:
        click.echo(f"{row['name']:<30} {row['quantity_on_hand']:>8} {row['used']:>8} {row['remaining']:>10}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(clinics_group)
    app.cli.add_command(admins_group)
    app.cli.add_command(report_group)
