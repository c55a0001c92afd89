# -*- coding: utf-8 -*-
"""
EnerjiOS - Application Entry Point

For development, run: python run.py
For production, use: gunicorn run:app
"""
import os
from datetime import date

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Create and configure the application
from enerjios import create_app
from config import get_config

app = create_app(get_config())


# ══════════════════════════════════════════════════════════════
# CLI COMMANDS
# ══════════════════════════════════════════════════════════════

@app.cli.command('init-db')
def init_db():
    """Initialize the database with tables"""
    from enerjios.extensions import db
    db.create_all()
    print("Database tables created.")


@app.cli.command('create-admin')
@click.option('--email', prompt='Admin email')
@click.option('--password', prompt='Admin password', hide_input=True, confirmation_prompt=True)
@click.option('--name', default='Platform Admin')
def create_admin(email, password, name):
    """Create the platform admin user"""
    from enerjios.extensions import db
    from enerjios.models import User, UserRole

    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        print(f"Error: '{email}' already exists.")
        return

    admin = User(email=email, name=name, role=UserRole.ADMIN)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()

    print(f"Admin user '{email}' created successfully.")


@app.cli.command('seed-demo')
def seed_demo():
    """Seed database with a demo company, staff, customer and products"""
    from enerjios.extensions import db
    from enerjios.models import Company, Customer, Department, Employee, Product, User, UserRole

    if Company.query.filter_by(tax_number='1111111111').first():
        print("Demo data already present.")
        return

    company = Company(name='Güneş Enerji Demo A.Ş.', tax_number='1111111111',
                      email='demo@enerjios.com', city='Ankara')
    db.session.add(company)
    db.session.flush()

    owner = User(email='firma@enerjios.com', name='Demo Firma', role=UserRole.COMPANY, company_id=company.id)
    owner.set_password('demo12345')
    staff = User(email='personel@enerjios.com', name='Ayşe Yılmaz', role=UserRole.EMPLOYEE, company_id=company.id)
    staff.set_password('demo12345')
    db.session.add_all([owner, staff])
    db.session.flush()

    department = Department(company_id=company.id, name='Saha Ekibi')
    db.session.add(department)
    db.session.flush()

    db.session.add(Employee(
        company_id=company.id, user_id=staff.id, department_id=department.id,
        employee_code='EMP-001', first_name='Ayşe', last_name='Yılmaz',
        email=staff.email, position='Montaj Sorumlusu', hire_date=date(2020, 3, 1),
    ))
    db.session.add(Customer(
        company_id=company.id, first_name='Mehmet', last_name='Demir',
        email='musteri@example.com', phone='+905551112233', city='Ankara',
    ))

    demo_products = [
        {"name": "550W Monokristal Panel", "brand": "Demo", "category": "PANEL", "unit_price": 180, "currency": "USD", "power_watt": 550, "warranty_years": 25},
        {"name": "10kW Hibrit İnverter", "brand": "Demo", "category": "INVERTER", "unit_price": 1450, "currency": "USD", "warranty_years": 10},
        {"name": "Çatı Montaj Seti", "brand": "Demo", "category": "MOUNTING", "unit_price": 3500, "currency": "TRY", "unit": "set"},
    ]
    for p in demo_products:
        db.session.add(Product(company_id=company.id, **p))

    db.session.commit()
    print(f"Demo company '{company.name}' with {len(demo_products)} products created.")


@app.cli.command('run-scheduler')
@click.option('--only', type=click.Choice(['kvkk', 'quotes', 'cleanup']), default=None)
def run_scheduler(only):
    """Run the periodic jobs once (for hosts without Celery beat)"""
    from enerjios.services.kvkk_scheduler import run_automated_monitoring
    from enerjios.services.quote_scheduler import run_scheduled_tasks
    from enerjios.tasks.cleanup_tasks import CLEANUP_JOBS

    if only in (None, 'kvkk'):
        result = run_automated_monitoring()
        print(f"KVKK: {result['overdue']['notified']} overdue, {result['reminders']['notified']} reminders")
    if only in (None, 'quotes'):
        results = run_scheduled_tasks()
        print(f"Quotes: {results}")
    if only in (None, 'cleanup'):
        for name, job in CLEANUP_JOBS.items():
            print(f"Cleanup {name}: {job()}")


# ══════════════════════════════════════════════════════════════
# MAIN
# ══════════════════════════════════════════════════════════════

if __name__ == '__main__':
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║              ENERJIOS - Solar Business Platform              ║
║══════════════════════════════════════════════════════════════║
║  Running on: http://localhost:{port}                            ║
║  API Docs:   http://localhost:{port}/apidocs                    ║
║  Debug Mode: {debug}                                           ║
╚══════════════════════════════════════════════════════════════╝
    """)

    app.run(host='0.0.0.0', port=port, debug=debug)
