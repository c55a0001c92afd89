# -*- coding: utf-8 -*-
"""
Tests for customers and the product catalog
"""
from enerjios.models import AuditLog, Customer, Product, Project, Quote


class TestCustomerAPI:
    """Tenant-scoped customer management"""

    def test_create_and_search(self, client, company, company_user, auth_headers):
        headers = auth_headers(company_user)
        response = client.post('/api/customers', headers=headers, json={
            'first_name': 'Fatma', 'last_name': 'Arslan', 'city': 'Antalya', 'phone': '05441112233',
        })
        assert response.status_code == 201
        assert response.get_json()['customer']['company_id'] == company.id

        found = client.get('/api/customers?search=arsl', headers=headers).get_json()
        assert found['total'] == 1

    def test_list_is_scoped(self, client, db_session, customer, other_company, company_user, auth_headers):
        db_session.add(Customer(company_id=other_company.id, first_name='Ali', last_name='Veli'))
        db_session.commit()

        data = client.get('/api/customers', headers=auth_headers(company_user)).get_json()
        assert [c['id'] for c in data['customers']] == [customer.id]

    def test_update_is_audited(self, client, customer, company_user, auth_headers):
        response = client.put(f'/api/customers/{customer.id}', headers=auth_headers(company_user),
                              json={'city': 'Manisa'})

        assert response.status_code == 200
        log = AuditLog.query.filter_by(table_name='customers', action='update').one()
        assert log.old_data == {'city': 'İzmir'}
        assert log.new_data == {'city': 'Manisa'}

    def test_invalid_email(self, client, company_user, auth_headers):
        response = client.post('/api/customers', headers=auth_headers(company_user), json={
            'first_name': 'Fatma', 'last_name': 'Arslan', 'email': 'not-an-email',
        })
        assert response.status_code == 400

    def test_delete_removes_quotes_and_projects(self, client, db_session, company, customer,
                                                company_user, make_quote, auth_headers):
        project = Project(company_id=company.id, customer_id=customer.id, name='Demir Çatı GES')
        db_session.add(project)
        db_session.commit()
        make_quote(company, company_user, customer)
        make_quote(company, company_user, project_id=project.id)

        response = client.delete(f'/api/customers/{customer.id}', headers=auth_headers(company_user))

        assert response.status_code == 200
        assert response.get_json()['deleted'] == {'quotes': 2, 'projects': 1}
        assert Quote.query.count() == 0
        assert Project.query.count() == 0
        assert AuditLog.query.filter_by(table_name='customers', action='delete').count() == 1

    def test_employees_cannot_delete(self, client, customer, employee_user, auth_headers):
        response = client.delete(f'/api/customers/{customer.id}', headers=auth_headers(employee_user))
        assert response.status_code == 403


class TestProductCatalog:
    """Company catalogs plus shared products"""

    def test_catalog_includes_shared_products(self, client, db_session, company, other_company,
                                              company_user, auth_headers):
        db_session.add_all([
            Product(company_id=company.id, name='550W Panel', category='PANEL', unit_price=180),
            Product(company_id=None, name='Solar Kablo', category='CABLE', unit_price=25),
            Product(company_id=other_company.id, name='Rakip Panel', category='PANEL', unit_price=170),
            Product(company_id=company.id, name='Eski Panel', category='PANEL', unit_price=100, is_active=False),
        ])
        db_session.commit()

        products = client.get('/api/products', headers=auth_headers(company_user)).get_json()['products']
        assert sorted(p['name'] for p in products) == ['550W Panel', 'Solar Kablo']

    def test_create_product(self, client, company, company_user, auth_headers):
        response = client.post('/api/products', headers=auth_headers(company_user), json={
            'name': '10kW İnverter', 'category': 'INVERTER', 'unit_price': 1450, 'currency': 'usd',
        })
        assert response.status_code == 201
        product = response.get_json()['product']
        assert product['currency'] == 'USD'
        assert product['company_id'] == company.id

    def test_quote_item_uses_product_price(self, client, db_session, company, company_user, auth_headers):
        product = Product(company_id=company.id, name='550W Panel', unit_price=200)
        db_session.add(product)
        db_session.commit()

        response = client.post('/api/quotes', headers=auth_headers(company_user), json={
            'tax_rate': 0,
            'items': [{'product_id': product.id, 'quantity': 10}],
        })

        assert response.status_code == 201
        item = response.get_json()['quote']['items'][0]
        assert item['description'] == '550W Panel'
        assert item['total'] == 2000

    def test_other_company_product_rejected(self, client, db_session, other_company, company_user, auth_headers):
        product = Product(company_id=other_company.id, name='Rakip Panel', unit_price=150)
        db_session.add(product)
        db_session.commit()

        response = client.post('/api/quotes', headers=auth_headers(company_user), json={
            'items': [{'product_id': product.id, 'quantity': 1}],
        })
        assert response.status_code == 404
