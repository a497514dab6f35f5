"""
Flask CLI commands for database setup and administration.

Commands:
- flask init-db: Create all tables
- flask create-super-admin: Create the platform super admin
- flask seed-demo: Load a demo tenant with users, projects and tasks
"""
from datetime import datetime, timedelta, timezone

import click

from tenantboard.database import get_database
from tenantboard.models import (
    Tenant, User, UserRole, Project, Task, TaskPriority, TaskStatus, SubscriptionPlan,
)
from tenantboard.utils.security import validate_password_strength
from tenantboard.utils.validation import is_valid_email

DEMO_SUBDOMAIN = 'demo'
DEMO_PASSWORD = 'Demo1234'


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        get_database().create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('create-super-admin')
    @click.option('--email', prompt=True, help='Super admin email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Super admin password')
    @click.option('--full-name', prompt=True, help='Super admin full name')
    def create_super_admin(email, password, full_name):
        """Create a super admin that belongs to no tenant."""
        email = email.strip().lower()
        if not is_valid_email(email):
            raise click.BadParameter('Invalid email format', param_hint='--email')

        problems = validate_password_strength(password)
        if problems:
            raise click.BadParameter('; '.join(problems), param_hint='--password')

        session = get_database().session
        if session.query(User).filter_by(email=email).first():
            raise click.ClickException(f'A user with email {email} already exists')

        admin = User(
            tenant_id=None,
            email=email,
            full_name=full_name.strip(),
            role=UserRole.SUPER_ADMIN.value,
            is_active=True,
        )
        admin.set_password(password)
        try:
            session.add(admin)
            session.commit()
        except Exception:
            session.rollback()
            raise

        click.echo(click.style('Super admin created.', fg='green', bold=True))
        click.echo(f'   Email: {email}')
        click.echo(f'   ID: {admin.id}')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Create the 'Demo Company' tenant with sample data."""
        session = get_database().session
        if session.query(Tenant).filter_by(subdomain=DEMO_SUBDOMAIN).first():
            click.echo(click.style('Demo tenant already exists, nothing to do.', fg='yellow'))
            return

        try:
            tenant = Tenant(
                name='Demo Company',
                subdomain=DEMO_SUBDOMAIN,
                subscription_plan=SubscriptionPlan.PRO.value,
                max_users=50,
                max_projects=100,
            )
            session.add(tenant)
            session.flush()

            people = [
                ('admin@demo.com', 'Demo Admin', UserRole.TENANT_ADMIN.value),
                ('alice@demo.com', 'Alice Johnson', UserRole.USER.value),
                ('bob@demo.com', 'Bob Smith', UserRole.USER.value),
            ]
            users = []
            for email, full_name, role in people:
                user = User(tenant_id=tenant.id, email=email, full_name=full_name, role=role)
                user.set_password(DEMO_PASSWORD)
                session.add(user)
                users.append(user)
            session.flush()
            admin, alice, bob = users

            website = Project(
                tenant_id=tenant.id,
                name='Website Redesign',
                description='Refresh the marketing site',
                created_by=admin.id,
            )
            mobile = Project(
                tenant_id=tenant.id,
                name='Mobile App',
                description='First release of the mobile client',
                created_by=admin.id,
            )
            session.add_all([website, mobile])
            session.flush()

            now = datetime.now(timezone.utc)
            session.add_all([
                Task(tenant_id=tenant.id, project_id=website.id,
                     title='Design mockups', status=TaskStatus.COMPLETED.value,
                     priority=TaskPriority.HIGH.value, assigned_to=alice.id, due_date=now - timedelta(days=3)),
                Task(tenant_id=tenant.id, project_id=website.id,
                     title='Implement landing page', status=TaskStatus.IN_PROGRESS.value,
                     priority=TaskPriority.HIGH.value, assigned_to=bob.id, due_date=now + timedelta(days=7)),
                Task(tenant_id=tenant.id, project_id=website.id,
                     title='Write copy', status=TaskStatus.TODO.value,
                     priority=TaskPriority.MEDIUM.value, assigned_to=alice.id),
                Task(tenant_id=tenant.id, project_id=mobile.id,
                     title='Set up CI pipeline', status=TaskStatus.TODO.value,
                     priority=TaskPriority.MEDIUM.value, assigned_to=bob.id, due_date=now + timedelta(days=14)),
                Task(tenant_id=tenant.id, project_id=mobile.id,
                     title='Collect user feedback', status=TaskStatus.TODO.value,
                     priority=TaskPriority.LOW.value),
            ])
            session.commit()
        except Exception:
            session.rollback()
            raise

        click.echo(click.style('Demo data created.', fg='green', bold=True))
        click.echo(f'   Tenant: {tenant.name} ({tenant.id})')
        click.echo(f'   Login: admin@demo.com / {DEMO_PASSWORD}')
